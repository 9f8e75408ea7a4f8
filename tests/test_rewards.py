from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from Court.constants import BookingStatus
from Notifications.constants import NotificationType
from Notifications.models import Notification
from Rewards.constants import ActionType, HistoryType
from Rewards.exceptions import InsufficientPoints, RewardUnavailable
from Rewards.models import Reward, RewardHistory, RewardRule
from Rewards.services import RewardService

pytestmark = pytest.mark.django_db


@pytest.fixture
def free_hour(db):
    return Reward.objects.create(name="Free court hour", points_required=300)


class TestCalculatePoints:

    def test_percentage_rule_is_capped(self, reward_rules):
        assert RewardService.calculate_points(ActionType.BOOKING_COMPLETED, Decimal("200000")) == 500

    def test_percentage_rule_rounds_down(self, reward_rules):
        assert RewardService.calculate_points(ActionType.BOOKING_COMPLETED, Decimal("12399")) == 123

    def test_fixed_rule(self, reward_rules):
        assert RewardService.calculate_points(ActionType.OFF_PEAK_BOOKING) == 20

    def test_inactive_or_missing_rule(self, reward_rules):
        RewardRule.objects.filter(action_type=ActionType.BIRTHDAY).update(is_active=False)

        assert RewardService.calculate_points(ActionType.BIRTHDAY) == 0
        assert RewardService.calculate_points("unknown_action") == 0

    def test_below_minimum_amount(self, reward_rules):
        RewardRule.objects.filter(action_type=ActionType.BOOKING_COMPLETED).update(min_amount=Decimal("50000"))

        assert RewardService.calculate_points(ActionType.BOOKING_COMPLETED, Decimal("40000")) == 0


class TestAwardPoints:

    def test_updates_balance_ledger_and_notifies(self, reward_rules, customer):
        entry = RewardService.award_points(customer, ActionType.BIRTHDAY)

        assert entry.points == 100
        assert entry.type == HistoryType.EARNING
        assert customer.reward_points == 100
        assert Notification.objects.filter(user=customer, type=NotificationType.REWARD_POINTS).exists()

    def test_nothing_earned_writes_nothing(self, customer):
        assert RewardService.award_points(customer, ActionType.BIRTHDAY) is None
        assert not RewardHistory.objects.exists()

    def test_booking_rewards(self, reward_rules, customer, make_booking):
        booking = make_booking(status=BookingStatus.COMPLETED, days=-1, hour=7)

        entries = RewardService.process_booking_rewards(booking)

        assert {e.action_type for e in entries} == {
            ActionType.BOOKING_COMPLETED,
            ActionType.FIRST_BOOKING,
            ActionType.OFF_PEAK_BOOKING,
        }
        customer.refresh_from_db()
        assert customer.reward_points == 500 + 100 + 20

    def test_first_booking_bonus_once(self, reward_rules, customer, make_booking):
        RewardService.process_booking_rewards(make_booking(status=BookingStatus.COMPLETED, days=-2))

        entries = RewardService.process_booking_rewards(make_booking(status=BookingStatus.COMPLETED, days=-1))

        assert ActionType.FIRST_BOOKING not in {e.action_type for e in entries}

    def test_consecutive_bonus_once_per_month(self, reward_rules, customer, make_booking):
        for day in (1, 2, 3):
            make_booking(status=BookingStatus.COMPLETED, days=-day)

        first = RewardService.award_consecutive_bookings(customer)
        second = RewardService.award_consecutive_bookings(customer)

        assert first.points == 50
        assert second is None

    @pytest.mark.parametrize("hour, off_peak", [(8, True), (9, False), (19, False), (20, True)])
    def test_off_peak_hours(self, slot, hour, off_peak):
        start, _ = slot(hour=hour)
        assert RewardService.is_off_peak(start) is off_peak


class TestRedeem:

    def test_redeem(self, client_for, customer, free_hour):
        RewardService.adjust_points(customer, 350)

        response = client_for(customer).post(f"/api/rewards/{free_hour.id}/redeem/")

        assert response.status_code == 200
        assert response.data["data"]["remaining_points"] == 50
        assert response.data["data"]["redemption"]["points"] == -300

    def test_insufficient_points(self, client_for, customer, free_hour):
        RewardService.adjust_points(customer, 100)

        response = client_for(customer).post(f"/api/rewards/{free_hour.id}/redeem/")

        assert response.status_code == 400
        assert response.data["error_code"] == "INSUFFICIENT_POINTS"
        customer.refresh_from_db()
        assert customer.reward_points == 100

    def test_inactive_reward(self, customer, free_hour):
        free_hour.is_active = False
        free_hour.save()

        with pytest.raises(RewardUnavailable):
            RewardService.redeem(customer, free_hour)


class TestAdminAdjustments:

    def test_award_and_deduct(self, client_for, admin_user, customer):
        client = client_for(admin_user)

        award = client.post(
            "/api/rewards/admin/award/", {"user_id": customer.id, "points": 80}, format="json"
        )
        deduct = client.post(
            "/api/rewards/admin/deduct/",
            {"user_id": customer.id, "points": 30, "description": "Correction"},
            format="json",
        )

        assert award.status_code == 201
        assert deduct.data["data"]["current_points"] == 50
        assert deduct.data["data"]["entry"]["type"] == HistoryType.ADJUSTMENT

    def test_deduct_below_zero(self, client_for, admin_user, customer):
        response = client_for(admin_user).post(
            "/api/rewards/admin/deduct/", {"user_id": customer.id, "points": 10}, format="json"
        )

        assert response.status_code == 400
        assert not RewardHistory.objects.exists()

    def test_adjust_points_guard(self, customer):
        with pytest.raises(InsufficientPoints):
            RewardService.adjust_points(customer, -1)

    def test_user_history(self, client_for, admin_user, customer):
        RewardService.adjust_points(customer, 10)

        response = client_for(admin_user).get(f"/api/rewards/admin/users/{customer.id}/history/")

        assert len(response.data["data"]) == 1

    def test_customers_cannot_adjust(self, client_for, customer):
        response = client_for(customer).post(
            "/api/rewards/admin/award/", {"user_id": customer.id, "points": 1000}, format="json"
        )

        assert response.status_code == 403


class TestExpiry:

    def test_old_earnings_expire(self, reward_rules, customer):
        entry = RewardService.award_points(customer, ActionType.BIRTHDAY)
        RewardHistory.objects.filter(id=entry.id).update(
            created_at=timezone.now() - timedelta(days=400)
        )

        assert RewardService.expire_points() == 1

        customer.refresh_from_db()
        assert customer.reward_points == 0
        assert RewardHistory.objects.get(id=entry.id).expired is True
        assert RewardHistory.objects.filter(type=HistoryType.EXPIRATION, points=-100).exists()
        # Already written off
        assert RewardService.expire_points() == 0

    def test_expiry_capped_at_balance(self, reward_rules, customer, free_hour):
        entry = RewardService.award_points(customer, ActionType.BIRTHDAY)
        RewardService.adjust_points(customer, -60)
        RewardHistory.objects.filter(id=entry.id).update(
            created_at=timezone.now() - timedelta(days=400)
        )

        RewardService.expire_points()

        customer.refresh_from_db()
        assert customer.reward_points == 0
        assert RewardHistory.objects.get(type=HistoryType.EXPIRATION).points == -40

    def test_recent_earnings_kept(self, reward_rules, customer):
        RewardService.award_points(customer, ActionType.BIRTHDAY)

        assert RewardService.expire_points() == 0


def test_summary_endpoint(client_for, reward_rules, customer, free_hour):
    Reward.objects.create(name="Paddle rental", points_required=50)
    RewardService.award_points(customer, ActionType.BIRTHDAY)

    response = client_for(customer).get("/api/rewards/summary/")

    data = response.data["data"]
    assert data["current_points"] == 100
    assert data["total_points_earned"] == 100
    assert [r["name"] for r in data["redeemable_rewards"]] == ["Paddle rental"]
    assert data["next_reward"]["name"] == "Free court hour"
    assert data["points_to_next_reward"] == 200
