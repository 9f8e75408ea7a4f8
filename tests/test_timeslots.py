from datetime import date, time, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from Court.constants import BookingStatus
from Court.models import Booking
from Court.utils import combine_local, generate_hour_slots, js_day_of_week
from slots.models import CourtTimeslot

pytestmark = pytest.mark.django_db


@pytest.fixture
def play_day():
    return timezone.localdate() + timedelta(days=3)


@pytest.fixture
def template(court, play_day):
    day_of_week = js_day_of_week(play_day)
    return [
        CourtTimeslot.objects.create(
            court=court,
            day_of_week=day_of_week,
            start_time=time(hour, 0),
            end_time=time(hour + 1, 0),
            price=Decimal("180000.00"),
        )
        for hour in (8, 9, 10)
    ]


def test_weekday_numbering_starts_on_sunday():
    assert js_day_of_week(date(2024, 1, 7)) == 0
    assert js_day_of_week(date(2024, 1, 8)) == 1
    assert js_day_of_week(date(2024, 1, 13)) == 6


class TestTimeslotCrud:

    def test_owner_creates_template_slot(self, client_for, owner, court):
        response = client_for(owner).post(
            f"/api/courts/{court.id}/timeslots/",
            {"day_of_week": 1, "start_time": "07:00", "end_time": "08:00", "price": "150000"},
            format="json",
        )

        assert response.status_code == 201
        assert response.data["data"]["is_default_timeslot"] is True

    def test_dated_slot_takes_weekday_from_date(self, client_for, owner, court):
        response = client_for(owner).post(
            f"/api/courts/{court.id}/timeslots/",
            {
                "day_of_week": 3,
                "specific_date": "2030-06-02",
                "start_time": "07:00",
                "end_time": "08:00",
                "price": "150000",
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.data["data"]["day_of_week"] == js_day_of_week(date(2030, 6, 2))

    def test_start_must_precede_end(self, client_for, owner, court):
        response = client_for(owner).post(
            f"/api/courts/{court.id}/timeslots/",
            {"day_of_week": 1, "start_time": "09:00", "end_time": "08:00", "price": "150000"},
            format="json",
        )

        assert response.status_code == 400

    def test_other_users_cannot_manage(self, client_for, customer, court, template):
        client = client_for(customer)

        create = client.post(
            f"/api/courts/{court.id}/timeslots/",
            {"day_of_week": 1, "start_time": "07:00", "end_time": "08:00"},
            format="json",
        )
        delete = client.delete(f"/api/timeslots/{template[0].id}/")

        assert create.status_code == 403
        assert delete.status_code == 403

    def test_owner_updates_and_deletes(self, client_for, owner, template):
        client = client_for(owner)

        update = client.patch(
            f"/api/timeslots/{template[0].id}/", {"price": "210000"}, format="json"
        )
        delete = client.delete(f"/api/timeslots/{template[1].id}/")

        assert update.data["data"]["price"] == "210000.00"
        assert delete.status_code == 204
        assert CourtTimeslot.objects.count() == 2

    def test_public_list(self, api_client, court, template):
        response = api_client.get(f"/api/courts/{court.id}/timeslots/")

        assert response.status_code == 200
        assert len(response.data["data"]) == 3


class TestTimeslotsForDate:

    def test_falls_back_to_weekday_template(self, api_client, court, template, play_day):
        response = api_client.get(
            f"/api/courts/{court.id}/timeslots/date/", {"date": play_day.isoformat()}
        )

        slots = response.data["data"]
        assert len(slots) == 3
        assert all(s["is_default_timeslot"] for s in slots)

    def test_dated_slots_override_template(self, api_client, court, template, play_day):
        CourtTimeslot.objects.create(
            court=court,
            day_of_week=js_day_of_week(play_day),
            specific_date=play_day,
            start_time=time(18, 0),
            end_time=time(19, 0),
            price=Decimal("250000.00"),
        )

        response = api_client.get(
            f"/api/courts/{court.id}/timeslots/date/", {"date": play_day.isoformat()}
        )

        slots = response.data["data"]
        assert [s["start_time"] for s in slots] == ["18:00:00"]
        assert slots[0]["is_default_timeslot"] is False

    def test_available_only(self, api_client, court, template, play_day):
        template[0].is_available = False
        template[0].save()

        response = api_client.get(
            f"/api/courts/{court.id}/timeslots/available/", {"date": play_day.isoformat()}
        )

        assert len(response.data["data"]) == 2

    def test_date_is_required(self, api_client, court):
        response = api_client.get(f"/api/courts/{court.id}/timeslots/date/")

        assert response.status_code == 400


class TestAvailability:

    def test_booked_slot_is_unavailable(self, api_client, court, customer, template, play_day):
        Booking.objects.create(
            court=court,
            user=customer,
            start_time=combine_local(play_day, time(9, 0)),
            end_time=combine_local(play_day, time(10, 0)),
            total_price=Decimal("180000.00"),
            status=BookingStatus.CONFIRMED,
        )

        response = api_client.get(
            f"/api/courts/{court.id}/availability/", {"date": play_day.isoformat()}
        )

        availability = {str(s["start_time"]): s["available"] for s in response.data["availability"]}
        assert availability == {"08:00:00": True, "09:00:00": False, "10:00:00": True}

    def test_cancelled_booking_keeps_slot_available(self, api_client, court, customer, template, play_day):
        Booking.objects.create(
            court=court,
            user=customer,
            start_time=combine_local(play_day, time(9, 0)),
            end_time=combine_local(play_day, time(10, 0)),
            total_price=Decimal("180000.00"),
            status=BookingStatus.CANCELLED,
        )

        response = api_client.get(
            f"/api/courts/{court.id}/availability/", {"date": play_day.isoformat()}
        )

        assert all(s["available"] for s in response.data["availability"])

    def test_price_range(self, api_client, court, template):
        template[2].price = Decimal("300000.00")
        template[2].save()

        response = api_client.get(f"/api/courts/{court.id}/price-range/")

        assert response.data["data"]["min_price"] == Decimal("180000.00")
        assert response.data["data"]["max_price"] == Decimal("300000.00")


class TestTemplateTools:

    def test_copy_template_to_date(self, client_for, owner, court, template, play_day):
        response = client_for(owner).post(
            f"/api/courts/{court.id}/timeslots/copy/",
            {"date": play_day.isoformat()},
            format="json",
        )

        assert response.status_code == 201
        assert response.data["created_count"] == 3
        assert CourtTimeslot.objects.filter(court=court, specific_date=play_day).count() == 3

    def test_delete_date_slots(self, client_for, owner, court, template, play_day):
        client = client_for(owner)
        client.post(f"/api/courts/{court.id}/timeslots/copy/", {"date": play_day.isoformat()}, format="json")

        response = client.delete(
            f"/api/courts/{court.id}/timeslots/by-date/?date={play_day.isoformat()}"
        )

        assert response.data["deleted_count"] == 3
        assert CourtTimeslot.objects.filter(specific_date__isnull=True).count() == 3

    def test_generate_template_skips_existing(self, client_for, owner, court, template, play_day):
        day_of_week = js_day_of_week(play_day)

        response = client_for(owner).post(
            f"/api/courts/{court.id}/timeslots/generate/",
            {
                "days_of_week": [day_of_week],
                "open_time": "08:00",
                "close_time": "12:00",
                "price": "180000",
            },
            format="json",
        )

        assert response.status_code == 201
        # 08-11 already exist from the template fixture
        assert response.data["created_count"] == 1

    def test_generate_template_until_midnight(self, client_for, api_client, owner, customer, court, play_day):
        response = client_for(owner).post(
            f"/api/courts/{court.id}/timeslots/generate/",
            {
                "days_of_week": [js_day_of_week(play_day)],
                "open_time": "21:00",
                "close_time": "00:00",
                "price": "220000",
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.data["created_count"] == 3
        last = CourtTimeslot.objects.get(court=court, start_time=time(23, 0))
        assert last.end_time == time(0, 0)

        Booking.objects.create(
            court=court,
            user=customer,
            start_time=combine_local(play_day, time(23, 0)),
            end_time=combine_local(play_day + timedelta(days=1), time(0, 0)),
            total_price=Decimal("220000.00"),
            status=BookingStatus.CONFIRMED,
        )
        availability = api_client.get(
            f"/api/courts/{court.id}/availability/", {"date": play_day.isoformat()}
        ).data["availability"]

        assert [s["available"] for s in availability] == [True, True, False]

    def test_close_before_open_is_rejected(self, client_for, owner, court, play_day):
        response = client_for(owner).post(
            f"/api/courts/{court.id}/timeslots/generate/",
            {
                "days_of_week": [js_day_of_week(play_day)],
                "open_time": "18:00",
                "close_time": "02:00",
                "price": "220000",
            },
            format="json",
        )

        assert response.status_code == 400


@pytest.mark.parametrize("open_time, close_time, expected", [
    (time(8, 0), time(11, 0), [(time(8, 0), time(9, 0)), (time(9, 0), time(10, 0)), (time(10, 0), time(11, 0))]),
    (time(22, 0), time(0, 0), [(time(22, 0), time(23, 0)), (time(23, 0), time(0, 0))]),
    (time(22, 30), time(22, 30), [(time(22, 30), time(23, 30))]),
])
def test_generate_hour_slots(open_time, close_time, expected):
    assert generate_hour_slots(open_time, close_time) == expected
