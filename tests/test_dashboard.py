from datetime import timedelta
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import CommandError, call_command
from django.urls import reverse
from django.utils import timezone

from Accounts.models import User
from Court.constants import BookingStatus, CourtStatus, PaymentMethod, PaymentStatus
from Court.service import PaymentService
from Dashboard.models import AdminLog
from Dashboard.tasks import ScheduledTaskService, previous_month_start
from Notifications.constants import NotificationType
from Notifications.models import Notification
from Promotions.constants import PromotionType
from Promotions.models import Promotion, PromotionUsage
from Rewards.constants import ActionType
from Rewards.models import RewardHistory
from Rewards.services import RewardService

pytestmark = pytest.mark.django_db


@pytest.fixture
def admin_client(client_for, admin_user):
    return client_for(admin_user)


@pytest.fixture
def paid_booking(customer, make_booking):
    booking = make_booking()
    PaymentService.process_payment(booking, customer, PaymentMethod.BANK_TRANSFER)
    booking.refresh_from_db()
    return booking


class TestDashboard:

    def test_stats(self, admin_client, customer, pending_owner, court, paid_booking):
        response = admin_client.get("/api/admin/dashboard/")

        assert response.status_code == 200
        data = response.data["data"]
        assert data["profile"]["id"].startswith("ADM-")
        stats = data["stats"]
        assert stats["users"]["pending_owner_approvals"] == 1
        assert stats["users"]["total_users"] == 4
        assert stats["courts"]["total_courts"] == 1
        assert stats["bookings"][BookingStatus.CONFIRMED] == 1
        assert stats["revenue"]["total_revenue"] == Decimal("200000.00")
        assert len(data["recent_bookings"]) == 1

    def test_customers_are_forbidden(self, client_for, customer):
        assert client_for(customer).get("/api/admin/dashboard/").status_code == 403

    def test_staff_flag_counts_as_admin(self, client_for, customer):
        customer.is_staff = True
        customer.save()

        assert client_for(customer).get("/api/admin/dashboard/").status_code == 200


class TestCourtOwnerApproval:

    def test_list_pending(self, admin_client, owner, pending_owner):
        response = admin_client.get("/api/admin/court-owners/", {"status": User.PENDING})

        assert [u["id"] for u in response.data["data"]] == [pending_owner.id]

    def test_approve(self, admin_client, pending_owner, mailoutbox):
        response = admin_client.put(
            f"/api/admin/court-owners/{pending_owner.id}/decision/",
            {"action": "approve"},
            format="json",
        )

        assert response.status_code == 200
        pending_owner.refresh_from_db()
        assert pending_owner.approval_status == User.APPROVED
        assert Notification.objects.get(user=pending_owner).type == NotificationType.OWNER_APPROVAL
        assert mailoutbox[0].subject == "Account Approved"

    def test_reject_with_reason(self, admin_client, pending_owner, mailoutbox):
        admin_client.put(
            f"/api/admin/court-owners/{pending_owner.id}/decision/",
            {"action": "reject", "admin_notes": "Tax code does not match"},
            format="json",
        )

        pending_owner.refresh_from_db()
        assert pending_owner.approval_status == User.REJECTED
        assert pending_owner.admin_notes == "Tax code does not match"
        assert "Tax code does not match" in mailoutbox[0].body

    def test_django_admin_bulk_approve(self, client, pending_owner, customer, mailoutbox):
        superuser = User.objects.create_superuser(
            email="root@example.com", password="x", full_name="Root"
        )
        client.force_login(superuser)

        response = client.post(
            reverse("admin:Accounts_user_changelist"),
            {"action": "approve_owners", "_selected_action": [pending_owner.id, customer.id]},
        )

        assert response.status_code == 302
        pending_owner.refresh_from_db()
        customer.refresh_from_db()
        assert pending_owner.approval_status == User.APPROVED
        assert customer.approval_status == ""
        assert len(mailoutbox) == 1
        assert AdminLog.objects.get().details == {"source": "django_admin"}

    def test_customer_is_not_an_owner(self, admin_client, customer):
        response = admin_client.put(
            f"/api/admin/court-owners/{customer.id}/decision/", {"action": "approve"}, format="json"
        )

        assert response.status_code == 404


class TestUserManagement:

    def test_filters(self, admin_client, customer, other_customer, owner):
        by_role = admin_client.get("/api/admin/users/", {"role": User.COURT_OWNER})
        by_search = admin_client.get("/api/admin/users/", {"search": "minh"})

        assert by_role.data["count"] == 1
        assert [u["id"] for u in by_search.data["data"]] == [other_customer.id]

    def test_detail_counts(self, admin_client, customer, make_booking):
        make_booking()

        response = admin_client.get(f"/api/admin/users/{customer.id}/")

        assert response.data["data"]["bookings_count"] == 1

    def test_deactivate(self, admin_client, customer):
        response = admin_client.put(
            f"/api/admin/users/{customer.id}/status/", {"is_active": False}, format="json"
        )

        assert response.data["message"] == "User deactivated"
        customer.refresh_from_db()
        assert not customer.is_active

    def test_cannot_change_own_status(self, admin_client, admin_user):
        response = admin_client.put(
            f"/api/admin/users/{admin_user.id}/status/", {"is_active": False}, format="json"
        )

        assert response.status_code == 400

    def test_notes(self, admin_client, customer):
        admin_client.put(
            f"/api/admin/users/{customer.id}/notes/", {"admin_notes": "VIP"}, format="json"
        )

        customer.refresh_from_db()
        assert customer.admin_notes == "VIP"


class TestBookingAndCourtManagement:

    def test_booking_filters(self, admin_client, make_booking):
        make_booking()
        make_booking(status=BookingStatus.CONFIRMED, hour=14)

        response = admin_client.get("/api/admin/bookings/", {"status": BookingStatus.CONFIRMED})

        assert response.data["count"] == 1

    def test_admin_confirms_booking(self, admin_client, make_booking):
        booking = make_booking()

        response = admin_client.put(
            f"/api/admin/bookings/{booking.id}/status/",
            {"status": BookingStatus.CONFIRMED},
            format="json",
        )

        assert response.status_code == 200
        booking.refresh_from_db()
        assert booking.status == BookingStatus.CONFIRMED

    def test_court_maintenance(self, admin_client, court):
        response = admin_client.put(
            f"/api/admin/courts/{court.id}/status/",
            {"status": CourtStatus.MAINTENANCE, "admin_notes": "Net replacement"},
            format="json",
        )

        assert response.data["data"]["status"] == CourtStatus.MAINTENANCE
        court.refresh_from_db()
        assert court.admin_notes == "Net replacement"
        assert not court.is_bookable


class TestPayments:

    def test_refund_cancels_booking(self, admin_client, customer, paid_booking):
        payment = paid_booking.payments.get()

        response = admin_client.post(
            f"/api/admin/payments/{payment.id}/refund/", {"reason": "Court flooded"}, format="json"
        )

        assert response.data["data"]["status"] == PaymentStatus.REFUNDED
        paid_booking.refresh_from_db()
        assert paid_booking.status == BookingStatus.CANCELLED
        assert Notification.objects.filter(
            user=customer, type=NotificationType.PAYMENT_REFUNDED
        ).exists()

    def test_refund_requested_filter(self, admin_client, customer, paid_booking):
        payment = paid_booking.payments.get()
        PaymentService.request_cancellation(payment, customer, "Injury")

        response = admin_client.get("/api/admin/payments/", {"refund_requested": "true"})

        assert [p["id"] for p in response.data["data"]] == [payment.id]


class TestReports:

    def test_revenue_json(self, admin_client, paid_booking):
        response = admin_client.get("/api/admin/reports/revenue/")

        data = response.data["data"]
        assert data["total_revenue"] == Decimal("200000.00")
        assert data["rows"][0]["period"] == timezone.localdate().isoformat()

    def test_revenue_csv(self, admin_client, paid_booking):
        response = admin_client.get("/api/admin/reports/revenue/", {"export": "csv"})

        assert response["Content-Type"].startswith("text/csv")
        content = response.content.decode("utf-8-sig")
        assert content.splitlines()[0] == "Period,Revenue,Payments"

    def test_bookings_csv(self, admin_client, customer, make_booking):
        make_booking(days=-1)

        response = admin_client.get("/api/admin/reports/bookings/", {"export": "csv"})

        lines = response.content.decode("utf-8-sig").splitlines()
        assert len(lines) == 2
        assert customer.email in lines[1]

    def test_start_after_end(self, admin_client):
        response = admin_client.get(
            "/api/admin/reports/bookings/", {"start_date": "2030-02-01", "end_date": "2030-01-01"}
        )

        assert response.status_code == 400


    def test_users_report(self, admin_client, customer, other_customer, pending_owner, make_booking):
        make_booking(days=-1)

        data = admin_client.get("/api/admin/reports/users/").data["data"]

        # admin, two customers, approved and pending owner
        assert data["total_users"] == 5
        assert data["new_users"] == 5
        assert data["approved_court_owners"] == 1
        assert data["pending_court_owners"] == 1
        assert data["registrations"] == [{"period": timezone.localdate().isoformat(), "count": 5}]
        assert data["top_by_bookings"][0]["id"] == customer.id
        assert data["top_by_spending"][0]["spent"] == Decimal("200000.00")

    def test_users_csv(self, admin_client, customer, make_booking):
        make_booking()

        response = admin_client.get("/api/admin/reports/users/", {"export": "csv"})

        lines = response.content.decode("utf-8-sig").splitlines()
        assert lines[0] == "ID,Name,Email,Role,Active,Joined,Bookings,Reward Points"
        customer_line = next(line for line in lines if customer.email in line)
        assert customer_line.split(",")[6] == "1"

    def test_promotions_report(self, admin_client, customer, make_booking):
        now = timezone.now()
        spring = Promotion.objects.create(
            code="SPRING",
            discount_percent=Decimal("10"),
            start_date=now - timedelta(days=1),
            end_date=now + timedelta(days=10),
        )
        Promotion.objects.create(
            code="IDLE",
            discount_percent=Decimal("5"),
            start_date=now - timedelta(days=1),
            end_date=now + timedelta(days=10),
            is_active=False,
        )
        PromotionUsage.objects.create(
            promotion=spring, user=customer, booking=make_booking(), discount_amount=Decimal("20000.00")
        )

        data = admin_client.get("/api/admin/reports/promotions/").data["data"]

        assert data["total_promotions"] == 2
        assert data["active_promotions"] == 1
        assert data["total_usages"] == 1
        assert data["total_discount"] == Decimal("20000.00")
        assert data["promotions"][0]["code"] == "SPRING"
        assert data["promotions"][0]["uses"] == 1
        assert data["promotions"][0]["unique_users"] == 1

    def test_promotions_csv(self, admin_client):
        now = timezone.now()
        Promotion.objects.create(
            code="SPRING",
            discount_percent=Decimal("10"),
            start_date=now,
            end_date=now + timedelta(days=10),
        )

        response = admin_client.get("/api/admin/reports/promotions/", {"export": "csv"})

        lines = response.content.decode("utf-8-sig").splitlines()
        assert lines[0].startswith("Code,Type,Discount %")
        assert lines[1].startswith("SPRING,")

    def test_rewards_report(self, admin_client, reward_rules, customer, other_customer):
        referral = RewardService.award_points(customer, ActionType.REFERRAL)
        birthday = RewardService.award_points(other_customer, ActionType.BIRTHDAY)

        data = admin_client.get("/api/admin/reports/rewards/").data["data"]

        assert data["total_points_earned"] == referral.points + birthday.points
        assert data["total_points_redeemed"] == 0
        assert {row["action_type"] for row in data["points_by_action_type"]} == {
            ActionType.REFERRAL, ActionType.BIRTHDAY
        }
        assert len(data["top_users_by_points"]) == 2

    def test_rewards_csv(self, admin_client, reward_rules, customer):
        RewardService.award_points(customer, ActionType.REFERRAL)

        response = admin_client.get("/api/admin/reports/rewards/", {"export": "csv"})

        lines = response.content.decode("utf-8-sig").splitlines()
        assert len(lines) == 2
        assert ActionType.REFERRAL in lines[1]

    def test_admin_activity_report(self, admin_client, admin_user, customer):
        ops = User.objects.create_user(
            email="ops@example.com", password="x", full_name="Ops Desk", role=User.ADMIN
        )
        admin_client.put(f"/api/admin/users/{customer.id}/notes/", {"admin_notes": "VIP"}, format="json")
        admin_client.put(f"/api/admin/users/{customer.id}/status/", {"is_active": False}, format="json")
        AdminLog.record(ops, "update_court_notes", entity_type="court")

        everyone = admin_client.get("/api/admin/reports/admin-activity/").data["data"]
        mine = admin_client.get(
            "/api/admin/reports/admin-activity/", {"admin_id": admin_user.id}
        ).data["data"]

        assert everyone["total_activities"] == 3
        assert everyone["most_active_admins"][0]["admin_id"] == admin_user.id
        assert everyone["most_active_admins"][0]["count"] == 2
        assert mine["total_activities"] == 2
        assert {row["action_type"] for row in mine["activity_by_action_type"]} == {
            "update_user_notes", "deactivate_user"
        }
        assert mine["activity_by_entity_type"] == [{"entity_type": "user", "count": 2}]
        assert mine["recent"][0]["action_type"] == "deactivate_user"

    def test_admin_activity_csv(self, admin_client, customer):
        admin_client.put(f"/api/admin/users/{customer.id}/notes/", {"admin_notes": "VIP"}, format="json")

        response = admin_client.get("/api/admin/reports/admin-activity/", {"export": "csv"})

        lines = response.content.decode("utf-8-sig").splitlines()
        assert lines[0] == "Date,Admin,Action,Entity,Entity ID,Details"
        assert len(lines) == 2
        assert "update_user_notes" in lines[1]

    def test_reports_are_admin_only(self, client_for, customer):
        client = client_for(customer)

        for report in ("users", "promotions", "rewards", "admin-activity"):
            assert client.get(f"/api/admin/reports/{report}/").status_code == 403


class TestAdminLog:

    def test_owner_decision(self, admin_client, admin_user, pending_owner):
        admin_client.put(
            f"/api/admin/court-owners/{pending_owner.id}/decision/",
            {"action": "reject", "admin_notes": "Blurry ID card"},
            format="json",
        )

        log = AdminLog.objects.get()
        assert log.admin == admin_user
        assert log.action_type == "reject_court_owner"
        assert (log.entity_type, log.entity_id) == ("user", pending_owner.id)
        assert log.details == {"admin_notes": "Blurry ID card"}

    def test_booking_and_court_changes(self, admin_client, court, make_booking):
        booking = make_booking()

        admin_client.put(
            f"/api/admin/bookings/{booking.id}/status/", {"status": BookingStatus.CONFIRMED}, format="json"
        )
        admin_client.put(
            f"/api/admin/courts/{court.id}/status/", {"status": CourtStatus.MAINTENANCE}, format="json"
        )

        booking_log = AdminLog.objects.get(entity_type="booking")
        court_log = AdminLog.objects.get(entity_type="court")
        assert booking_log.entity_id == booking.id
        assert booking_log.details == {"status": BookingStatus.CONFIRMED}
        assert court_log.action_type == "update_court_status"

    def test_promotion_crud(self, admin_client):
        now = timezone.now()
        created = admin_client.post(
            "/api/promotions/admin/",
            {
                "code": "OPENING",
                "discount_percent": "25",
                "start_date": now.isoformat(),
                "end_date": (now + timedelta(days=5)).isoformat(),
            },
            format="json",
        )
        admin_client.patch(
            f"/api/promotions/admin/{created.data['id']}/", {"is_active": False}, format="json"
        )
        admin_client.delete(f"/api/promotions/admin/{created.data['id']}/")

        actions = list(AdminLog.objects.order_by("id").values_list("action_type", flat=True))
        assert actions == ["create_promotion", "update_promotion", "delete_promotion"]
        assert AdminLog.objects.get(action_type="delete_promotion").details == {"code": "OPENING"}

    def test_broadcast(self, admin_client, customer):
        admin_client.post(
            "/api/notifications/send-system/",
            {"title": "Courts closed", "message": "Storm warning this afternoon"},
            format="json",
        )

        log = AdminLog.objects.get()
        assert log.action_type == "send_system_notification"
        assert log.entity_type == "notification"
        assert log.details["title"] == "Courts closed"

    def test_csv_export(self, admin_client):
        admin_client.get("/api/admin/reports/revenue/", {"export": "csv"})

        log = AdminLog.objects.get()
        assert log.action_type == "export_report"
        assert log.details == {"report": "revenue"}

    def test_reads_are_not_logged(self, admin_client, customer):
        admin_client.get("/api/admin/users/")
        admin_client.get("/api/admin/reports/revenue/")

        assert not AdminLog.objects.exists()



class TestScheduledTasks:

    def test_list(self, admin_client):
        response = admin_client.get("/api/admin/tasks/")

        assert "birthday_rewards" in response.data["data"]

    def test_birthday_rewards(self, reward_rules, customer):
        today = timezone.localdate()
        # 2000 was a leap year, so 29 February is valid too
        customer.birth_date = today.replace(year=2000)
        customer.save()

        assert ScheduledTaskService.run("birthday_rewards") == 1

        customer.refresh_from_db()
        assert customer.reward_points == 100
        assert Promotion.objects.filter(
            specific_user=customer, promotion_type=PromotionType.BIRTHDAY
        ).exists()

    def test_monthly_loyalty_points(self, reward_rules, customer, make_booking):
        now = timezone.localtime()
        last_month = previous_month_start(now)
        days_back = (now - last_month).days
        for offset in range(3):
            make_booking(status=BookingStatus.COMPLETED, days=-(days_back - offset))

        assert ScheduledTaskService.run("monthly_loyalty_points") == 1
        assert RewardHistory.objects.filter(
            user=customer, action_type=ActionType.MONTHLY_LOYALTY
        ).exists()

    def test_daily_completes_past_bookings(self, admin_client, make_booking):
        booking = make_booking(status=BookingStatus.CONFIRMED, days=-1)

        response = admin_client.post("/api/admin/tasks/daily/")

        assert response.data["data"]["complete_bookings"] == 1
        booking.refresh_from_db()
        assert booking.status == BookingStatus.COMPLETED

    def test_run_single_task(self, admin_client):
        response = admin_client.post("/api/admin/tasks/run/", {"task": "promotion_expiry"}, format="json")
        unknown = admin_client.post("/api/admin/tasks/run/", {"task": "make_coffee"}, format="json")
        bad_period = admin_client.post("/api/admin/tasks/hourly/")

        assert response.data["data"] == {"promotion_expiry": 0}
        assert unknown.status_code == 400
        assert bad_period.status_code == 400

    def test_management_command(self, make_booking):
        make_booking(status=BookingStatus.CONFIRMED, days=-1)
        out = StringIO()

        call_command("run_scheduled_tasks", "complete_bookings", stdout=out)

        assert "complete_bookings: 1" in out.getvalue()

    def test_management_command_unknown_task(self):
        with pytest.raises(CommandError):
            call_command("run_scheduled_tasks", "make_coffee")

    def test_weekly_summary_only_for_earners(self, reward_rules, customer, other_customer):
        RewardService.award_points(customer, ActionType.REFERRAL)

        assert ScheduledTaskService.run("weekly_summaries") == 1
        assert Notification.objects.filter(type=NotificationType.REWARD_SUMMARY).count() == 1


def test_previous_month_start_wraps_year():
    moment = timezone.localtime().replace(year=2024, month=1, day=15)
    start = previous_month_start(moment)

    assert (start.year, start.month, start.day) == (2023, 12, 1)
    assert start < moment - timedelta(days=14)
