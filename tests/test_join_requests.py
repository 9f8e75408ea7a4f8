import pytest

from Accounts.models import User
from Court.constants import BookingStatus, JoinRequestStatus, SkillLevel
from Court.models import BookingJoinRequest, BookingPlayer
from Notifications.constants import NotificationType
from Notifications.models import Notification

from .conftest import PASSWORD

pytestmark = pytest.mark.django_db


@pytest.fixture
def open_booking(make_booking, customer):
    booking = make_booking(
        status=BookingStatus.CONFIRMED,
        allow_join=True,
        needed_players=4,
        current_players=2,
        skill_level=SkillLevel.INTERMEDIATE,
    )
    BookingPlayer.objects.create(booking=booking, user=customer, is_booker=True, players_count=2)
    return booking


@pytest.fixture
def third_player(db):
    return User.objects.create_user(
        email="third@example.com", password=PASSWORD, full_name="Khoa Dang"
    )


def request_join(client, booking, players=1):
    return client.post(
        f"/api/bookings/{booking.id}/join-requests/",
        {"players_count": players, "message": "Can we play?"},
        format="json",
    )


class TestJoinableBookings:

    def test_lists_open_bookings_of_others(self, client_for, other_customer, customer, open_booking, make_booking):
        make_booking(status=BookingStatus.CONFIRMED, hour=15)

        others = client_for(other_customer).get("/api/bookings/joinable/")
        own = client_for(customer).get("/api/bookings/joinable/")

        assert [b["id"] for b in others.data["data"]] == [open_booking.id]
        assert own.data["data"] == []

    def test_filters(self, client_for, other_customer, open_booking):
        client = client_for(other_customer)

        match = client.get("/api/bookings/joinable/", {"skill_level": SkillLevel.INTERMEDIATE})
        miss = client.get("/api/bookings/joinable/", {"skill_level": SkillLevel.ADVANCED})
        too_many = client.get("/api/bookings/joinable/", {"players_needed": 3})
        by_place = client.get("/api/bookings/joinable/", {"location": "district 1"})

        assert len(match.data["data"]) == 1
        assert miss.data["data"] == []
        assert too_many.data["data"] == []
        assert len(by_place.data["data"]) == 1

    def test_detail_shows_spots(self, client_for, other_customer, open_booking):
        response = client_for(other_customer).get(f"/api/bookings/joinable/{open_booking.id}/")

        assert response.status_code == 200
        assert response.data["data"]["spots_available"] == 2
        assert len(response.data["data"]["players"]) == 1


class TestSendJoinRequest:

    def test_sends_and_notifies_booker(self, client_for, customer, other_customer, open_booking):
        response = request_join(client_for(other_customer), open_booking)

        assert response.status_code == 201
        assert response.data["data"]["status"] == JoinRequestStatus.PENDING
        assert Notification.objects.filter(user=customer, type=NotificationType.JOIN_REQUEST).exists()

    def test_cannot_join_own_booking(self, client_for, customer, open_booking):
        response = request_join(client_for(customer), open_booking)

        assert response.status_code == 400
        assert response.data["error_code"] == "JOIN_REQUEST_ERROR"

    def test_no_duplicate_pending_request(self, client_for, other_customer, open_booking):
        client = client_for(other_customer)
        request_join(client, open_booking)

        response = request_join(client, open_booking)

        assert response.status_code == 400
        assert BookingJoinRequest.objects.count() == 1

    def test_not_enough_spots(self, client_for, other_customer, open_booking):
        response = request_join(client_for(other_customer), open_booking, players=3)

        assert response.status_code == 400

    def test_booking_must_allow_join(self, client_for, other_customer, make_booking):
        booking = make_booking(status=BookingStatus.CONFIRMED, hour=16)

        response = request_join(client_for(other_customer), booking)

        assert response.status_code == 400

    def test_booking_must_be_confirmed(self, client_for, other_customer, make_booking):
        booking = make_booking(allow_join=True, hour=16)

        response = request_join(client_for(other_customer), booking)

        assert response.status_code == 400

    def test_existing_player_cannot_request(self, client_for, other_customer, open_booking):
        BookingPlayer.objects.create(booking=open_booking, user=other_customer)

        response = request_join(client_for(other_customer), open_booking)

        assert response.status_code == 400


class TestRespondToJoinRequest:

    def test_booker_lists_requests(self, client_for, customer, other_customer, open_booking):
        request_join(client_for(other_customer), open_booking)

        response = client_for(customer).get(f"/api/bookings/{open_booking.id}/join-requests/")
        forbidden = client_for(other_customer).get(f"/api/bookings/{open_booking.id}/join-requests/")

        assert len(response.data["data"]) == 1
        assert forbidden.status_code == 403

    def test_approve_adds_player(self, client_for, customer, other_customer, open_booking):
        request_id = request_join(client_for(other_customer), open_booking, players=2).data["data"]["id"]

        response = client_for(customer).put(
            f"/api/join-requests/{request_id}/respond/", {"action": "approve"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["data"]["status"] == JoinRequestStatus.APPROVED
        open_booking.refresh_from_db()
        assert open_booking.current_players == 4
        assert BookingPlayer.objects.filter(booking=open_booking, user=other_customer).exists()
        assert Notification.objects.filter(
            user=other_customer, type=NotificationType.JOIN_REQUEST_RESPONSE
        ).exists()

    def test_approve_rechecks_spots(self, client_for, customer, other_customer, third_player, open_booking):
        first = request_join(client_for(other_customer), open_booking, players=2).data["data"]["id"]
        second = request_join(client_for(third_player), open_booking, players=1).data["data"]["id"]
        booker = client_for(customer)
        booker.put(f"/api/join-requests/{first}/respond/", {"action": "approve"}, format="json")

        response = booker.put(f"/api/join-requests/{second}/respond/", {"action": "approve"}, format="json")

        assert response.status_code == 400
        assert BookingJoinRequest.objects.get(id=second).status == JoinRequestStatus.PENDING

    def test_reject(self, client_for, customer, other_customer, open_booking):
        request_id = request_join(client_for(other_customer), open_booking).data["data"]["id"]

        response = client_for(customer).put(
            f"/api/join-requests/{request_id}/respond/", {"action": "reject"}, format="json"
        )

        assert response.data["data"]["status"] == JoinRequestStatus.REJECTED
        open_booking.refresh_from_db()
        assert open_booking.current_players == 2

    def test_only_booker_responds(self, client_for, other_customer, open_booking):
        request_id = request_join(client_for(other_customer), open_booking).data["data"]["id"]

        response = client_for(other_customer).put(
            f"/api/join-requests/{request_id}/respond/", {"action": "approve"}, format="json"
        )

        assert response.status_code == 403

    def test_requester_cancels(self, client_for, other_customer, open_booking):
        request_id = request_join(client_for(other_customer), open_booking).data["data"]["id"]
        client = client_for(other_customer)

        response = client.put(f"/api/join-requests/{request_id}/cancel/")
        mine = client.get("/api/join-requests/mine/")

        assert response.data["data"]["status"] == JoinRequestStatus.CANCELLED
        assert mine.data["data"][0]["status"] == JoinRequestStatus.CANCELLED

    def test_cancelling_booking_closes_pending_requests(self, client_for, customer, other_customer, open_booking):
        request_id = request_join(client_for(other_customer), open_booking).data["data"]["id"]

        client_for(customer).put(f"/api/bookings/{open_booking.id}/cancel/")

        assert BookingJoinRequest.objects.get(id=request_id).status == JoinRequestStatus.CANCELLED
