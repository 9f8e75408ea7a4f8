from decimal import Decimal
from io import BytesIO

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image

from Court.constants import BookingStatus, CourtStatus, SkillLevel
from Court.models import Court

pytestmark = pytest.mark.django_db


def court_payload(**extra):
    payload = {
        "name": "Thao Dien Pickleball",
        "description": "Two covered courts",
        "location": "5 Quoc Huong, Thu Duc",
        "district": "769",
        "district_name": "Thu Duc",
        "hourly_rate": "150000",
    }
    payload.update(extra)
    return payload


@pytest.fixture
def second_court(owner):
    return Court.objects.create(
        owner=owner,
        name="Riverside Dinks",
        location="88 Ton Duc Thang, District 1",
        district="760",
        district_name="District 1",
        hourly_rate=Decimal("120000.00"),
        skill_level=SkillLevel.BEGINNER,
    )


class TestCourtCrud:

    def test_approved_owner_creates(self, client_for, owner):
        response = client_for(owner).post("/api/courts/", court_payload(), format="json")

        assert response.status_code == 201
        assert Court.objects.get(name="Thao Dien Pickleball").owner == owner

    def test_pending_owner_cannot_create(self, client_for, pending_owner):
        response = client_for(pending_owner).post("/api/courts/", court_payload(), format="json")

        assert response.status_code == 403

    def test_rate_must_be_positive(self, client_for, owner):
        response = client_for(owner).post(
            "/api/courts/", court_payload(hourly_rate="0"), format="json"
        )

        assert response.status_code == 400

    def test_public_list_hides_unbookable(self, api_client, court, second_court):
        second_court.status = CourtStatus.MAINTENANCE
        second_court.save()

        response = api_client.get("/api/courts/")

        assert [c["id"] for c in response.data["data"]] == [court.id]

    def test_detail_has_week_of_timeslots(self, api_client, court):
        response = api_client.get(f"/api/courts/{court.id}/")

        assert response.status_code == 200
        assert len(response.data["data"]["upcoming_timeslots"]) == 7

    def test_owner_updates(self, client_for, owner, court):
        response = client_for(owner).patch(
            f"/api/courts/{court.id}/", {"hourly_rate": "250000"}, format="json"
        )

        assert response.data["data"]["hourly_rate"] == "250000.00"

    def test_stranger_cannot_update(self, client_for, customer, court):
        response = client_for(customer).patch(
            f"/api/courts/{court.id}/", {"hourly_rate": "1"}, format="json"
        )

        assert response.status_code == 403

    def test_delete_blocked_by_active_bookings(self, client_for, owner, court, make_booking):
        make_booking(status=BookingStatus.CONFIRMED)

        response = client_for(owner).delete(f"/api/courts/{court.id}/")

        assert response.status_code == 400
        assert Court.objects.filter(id=court.id).exists()

    def test_delete(self, client_for, owner, court):
        response = client_for(owner).delete(f"/api/courts/{court.id}/")

        assert response.status_code == 204
        assert not Court.objects.exists()

    def test_my_courts(self, client_for, owner, court, second_court):
        response = client_for(owner).get("/api/courts/mine/")

        assert len(response.data["data"]) == 2


class TestCourtSearch:

    @pytest.mark.parametrize("params, expected", [
        ({"q": "riverside"}, ["Riverside Dinks"]),
        ({"district": "district 1"}, ["Riverside Dinks", "Saigon Pickle Club"]),
        ({"skill_level": SkillLevel.BEGINNER}, ["Riverside Dinks"]),
        ({"min_price": "150000"}, ["Saigon Pickle Club"]),
        ({"max_price": "150000"}, ["Riverside Dinks"]),
    ])
    def test_filters(self, api_client, court, second_court, params, expected):
        response = api_client.get("/api/courts/search/", params)

        assert sorted(c["name"] for c in response.data["data"]) == expected


def test_image_upload(client_for, owner, court, settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path
    buffer = BytesIO()
    Image.new("RGB", (40, 20), "green").save(buffer, format="PNG")
    upload = SimpleUploadedFile("court.png", buffer.getvalue(), content_type="image/png")

    response = client_for(owner).patch(
        f"/api/courts/{court.id}/image/", {"image": upload}, format="multipart"
    )

    assert response.status_code == 200
    court.refresh_from_db()
    assert court.image.name.startswith("court_images/")
