import json
import logging
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.mail import send_mail
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce, TruncDate, TruncMonth
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from Accounts.models import User
from Court.constants import BookingStatus, PaymentStatus
from Court.models import Booking, Court, Payment
from Notifications.constants import NotificationType
from Notifications.services import NotificationService
from Promotions.models import Promotion, PromotionUsage
from Rewards.constants import HistoryType
from Rewards.models import RewardHistory
from .models import AdminLog

logger = logging.getLogger(__name__)

TOP_LIMIT = 10


class AdminDashboardService:
    """
    All dashboard-related queries live here.
    Views should NOT touch the database directly.
    """

    @staticmethod
    def get_profile(admin_user):
        return {
            "id": f"ADM-{admin_user.id}",
            "name": admin_user.full_name or "Admin",
            "email": admin_user.email,
            "role": admin_user.role,
        }

    @staticmethod
    def get_user_stats():
        by_role = dict(
            User.objects.values_list("role").annotate(total=Count("id")).order_by()
        )
        pending_owners = User.objects.filter(
            role=User.COURT_OWNER, approval_status=User.PENDING
        ).count()

        return {
            "total_users": sum(by_role.values()),
            "customers": by_role.get(User.CUSTOMER, 0),
            "court_owners": by_role.get(User.COURT_OWNER, 0),
            "admins": by_role.get(User.ADMIN, 0),
            "pending_owner_approvals": pending_owners,
        }

    @staticmethod
    def get_booking_stats():
        by_status = dict(
            Booking.objects.values_list("status").annotate(total=Count("id")).order_by()
        )
        return {
            "total_bookings": sum(by_status.values()),
            **{status: by_status.get(status, 0) for status, _ in BookingStatus.CHOICES},
        }

    @staticmethod
    def get_revenue_stats():
        paid = Payment.objects.filter(status=PaymentStatus.COMPLETED)
        month_start = timezone.localtime().replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        total = paid.aggregate(total=Sum("amount"))["total"] or 0
        this_month = paid.filter(paid_at__gte=month_start).aggregate(total=Sum("amount"))["total"] or 0
        refunded = (
            Payment.objects.filter(status=PaymentStatus.REFUNDED)
            .aggregate(total=Sum("amount"))["total"] or 0
        )

        return {
            "total_revenue": total,
            "revenue_this_month": this_month,
            "refunded_amount": refunded,
            "currency": "VND",
        }

    @staticmethod
    def get_recent_bookings(limit=5):
        return (
            Booking.objects
            .select_related("court", "user")
            .order_by("-created_at")[:limit]
        )

    @classmethod
    def get_stats(cls):
        return {
            "users": cls.get_user_stats(),
            "courts": {
                "total_courts": Court.objects.count(),
                "available_courts": Court.objects.filter(is_available=True).count(),
            },
            "bookings": cls.get_booking_stats(),
            "revenue": cls.get_revenue_stats(),
        }


class OwnerApprovalService:

    @staticmethod
    def decide(owner, approve, admin_notes=""):
        if not owner.is_court_owner:
            raise ValidationError("User is not a court owner")

        owner.approval_status = User.APPROVED if approve else User.REJECTED
        if admin_notes:
            owner.admin_notes = admin_notes
        owner.save(update_fields=["approval_status", "admin_notes", "updated_at"])

        if approve:
            title = "Account Approved"
            message = "Your court owner account has been approved. You can now add your courts."
        else:
            title = "Account Rejected"
            message = "Your court owner account application was rejected."
            if admin_notes:
                message += f" Reason: {admin_notes}"

        NotificationService.send(
            owner,
            title=title,
            message=message,
            notification_type=NotificationType.OWNER_APPROVAL,
        )
        send_mail(
            subject=title,
            message=f"Hi {owner.full_name},\n\n{message}",
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[owner.email],
        )

        logger.info("Court owner %s %s", owner.id, owner.approval_status)
        return owner


class ReportService:

    @staticmethod
    def default_range(start_date=None, end_date=None):
        end_date = end_date or timezone.localdate()
        start_date = start_date or end_date - timedelta(days=30)
        if start_date > end_date:
            raise ValidationError("start_date must be before end_date")
        return start_date, end_date

    @classmethod
    def revenue(cls, start_date=None, end_date=None, group_by="day"):
        start_date, end_date = cls.default_range(start_date, end_date)
        trunc = TruncMonth("paid_at") if group_by == "month" else TruncDate("paid_at")

        rows = (
            Payment.objects
            .filter(
                status=PaymentStatus.COMPLETED,
                paid_at__date__gte=start_date,
                paid_at__date__lte=end_date,
            )
            .annotate(period=trunc)
            .values("period")
            .annotate(revenue=Sum("amount"), payments=Count("id"))
            .order_by("period")
        )

        return [
            {
                "period": row["period"].strftime("%Y-%m" if group_by == "month" else "%Y-%m-%d"),
                "revenue": row["revenue"],
                "payments": row["payments"],
            }
            for row in rows
        ]

    @classmethod
    def bookings(cls, start_date=None, end_date=None):
        start_date, end_date = cls.default_range(start_date, end_date)

        return (
            Booking.objects
            .filter(start_time__date__gte=start_date, start_time__date__lte=end_date)
            .select_related("court", "user")
            .order_by("start_time")
        )

    @classmethod
    def court_performance(cls, start_date=None, end_date=None):
        start_date, end_date = cls.default_range(start_date, end_date)

        return (
            Booking.objects
            .filter(start_time__date__gte=start_date, start_time__date__lte=end_date)
            .exclude(status=BookingStatus.CANCELLED)
            .values("court_id", "court__name")
            .annotate(bookings=Count("id"), revenue=Sum("total_price"))
            .order_by("-revenue")
        )

    @staticmethod
    def booking_rows(bookings):
        yield ["ID", "Court", "Customer", "Email", "Start", "End", "Status", "Total", "Discount"]

        for booking in bookings:
            yield [
                booking.id,
                booking.court.name,
                booking.user.full_name,
                booking.user.email,
                timezone.localtime(booking.start_time).strftime("%Y-%m-%d %H:%M"),
                timezone.localtime(booking.end_time).strftime("%Y-%m-%d %H:%M"),
                booking.status,
                booking.total_price,
                booking.discount_amount,
            ]

    @staticmethod
    def revenue_rows(rows):
        yield ["Period", "Revenue", "Payments"]

        for row in rows:
            yield [row["period"], row["revenue"], row["payments"]]

    @staticmethod
    def _by_period(queryset, field, group_by, **aggregates):
        trunc = TruncMonth(field) if group_by == "month" else TruncDate(field)
        fmt = "%Y-%m" if group_by == "month" else "%Y-%m-%d"

        rows = (
            queryset
            .annotate(period=trunc)
            .values("period")
            .annotate(**aggregates)
            .order_by("period")
        )
        return [{**row, "period": row["period"].strftime(fmt)} for row in rows]

    # ----------------------------------
    # USERS
    # ----------------------------------
    @classmethod
    def joined_users(cls, start_date=None, end_date=None):
        start_date, end_date = cls.default_range(start_date, end_date)

        return (
            User.objects
            .filter(created_at__date__gte=start_date, created_at__date__lte=end_date)
            .order_by("created_at")
        )

    @classmethod
    def users(cls, start_date=None, end_date=None, group_by="day"):
        joined = cls.joined_users(start_date, end_date)
        owners = User.objects.filter(role=User.COURT_OWNER)
        customers = User.objects.filter(role=User.CUSTOMER)
        not_cancelled = ~Q(bookings__status=BookingStatus.CANCELLED)

        top_by_bookings = (
            customers
            .annotate(booking_count=Count("bookings", filter=not_cancelled))
            .filter(booking_count__gt=0)
            .order_by("-booking_count", "id")
            .values("id", "full_name", "email", "booking_count")[:TOP_LIMIT]
        )
        top_by_spending = (
            customers
            .annotate(spent=Sum("bookings__total_price", filter=not_cancelled))
            .filter(spent__gt=0)
            .order_by("-spent", "id")
            .values("id", "full_name", "email", "spent")[:TOP_LIMIT]
        )

        return {
            "total_users": User.objects.count(),
            "new_users": joined.count(),
            "users_by_role": list(
                User.objects.values("role").annotate(count=Count("id")).order_by("role")
            ),
            "active_users": User.objects.filter(is_active=True).count(),
            "inactive_users": User.objects.filter(is_active=False).count(),
            "approved_court_owners": owners.filter(approval_status=User.APPROVED).count(),
            "pending_court_owners": owners.filter(approval_status=User.PENDING).count(),
            "registrations": cls._by_period(joined, "created_at", group_by, count=Count("id")),
            "top_by_bookings": list(top_by_bookings),
            "top_by_spending": list(top_by_spending),
        }

    @staticmethod
    def user_rows(users):
        yield ["ID", "Name", "Email", "Role", "Active", "Joined", "Bookings", "Reward Points"]

        for user in users.annotate(booking_count=Count("bookings")):
            yield [
                user.id,
                user.full_name,
                user.email,
                user.role,
                user.is_active,
                timezone.localtime(user.created_at).strftime("%Y-%m-%d %H:%M"),
                user.booking_count,
                user.reward_points,
            ]

    # ----------------------------------
    # PROMOTIONS
    # ----------------------------------
    @classmethod
    def promotions(cls, start_date=None, end_date=None):
        """Every promotion with its usage inside the range."""
        start_date, end_date = cls.default_range(start_date, end_date)
        in_range = Q(usages__used_at__date__gte=start_date, usages__used_at__date__lte=end_date)

        return (
            Promotion.objects
            .annotate(
                uses=Count("usages", filter=in_range),
                unique_users=Count("usages__user", filter=in_range, distinct=True),
                total_discount=Coalesce(
                    Sum("usages__discount_amount", filter=in_range),
                    Value(Decimal("0.00")),
                    output_field=DecimalField(max_digits=12, decimal_places=2),
                ),
            )
            .order_by("-uses", "code")
        )

    @classmethod
    def promotion_summary(cls, promotions, start_date=None, end_date=None, group_by="day"):
        start_date, end_date = cls.default_range(start_date, end_date)
        usages = PromotionUsage.objects.filter(
            used_at__date__gte=start_date, used_at__date__lte=end_date
        )

        return {
            "total_promotions": promotions.count(),
            "active_promotions": promotions.filter(is_active=True).count(),
            "total_usages": usages.count(),
            "total_discount": usages.aggregate(total=Sum("discount_amount"))["total"] or Decimal("0.00"),
            "usages_by_date": cls._by_period(
                usages, "used_at", group_by, count=Count("id"), discount=Sum("discount_amount")
            ),
        }

    @staticmethod
    def promotion_rows(promotions):
        yield ["Code", "Type", "Discount %", "Active", "Starts", "Ends", "Uses", "Unique Users", "Total Discount"]

        for promotion in promotions:
            yield [
                promotion.code,
                promotion.promotion_type,
                promotion.discount_percent,
                promotion.is_active,
                timezone.localtime(promotion.start_date).strftime("%Y-%m-%d"),
                timezone.localtime(promotion.end_date).strftime("%Y-%m-%d"),
                promotion.uses,
                promotion.unique_users,
                promotion.total_discount,
            ]

    # ----------------------------------
    # REWARDS
    # ----------------------------------
    @classmethod
    def reward_history(cls, start_date=None, end_date=None):
        start_date, end_date = cls.default_range(start_date, end_date)

        return (
            RewardHistory.objects
            .filter(created_at__date__gte=start_date, created_at__date__lte=end_date)
            .select_related("user")
            .order_by("created_at")
        )

    @classmethod
    def rewards(cls, history, group_by="day"):
        earned = history.filter(type=HistoryType.EARNING)
        # Redemptions are stored as negative amounts
        redeemed = history.filter(type=HistoryType.REDEMPTION)

        return {
            "total_points_earned": earned.aggregate(total=Sum("points"))["total"] or 0,
            "total_points_redeemed": abs(redeemed.aggregate(total=Sum("points"))["total"] or 0),
            "points_earned_by_date": cls._by_period(earned, "created_at", group_by, points=Sum("points")),
            "points_redeemed_by_date": cls._by_period(redeemed, "created_at", group_by, points=Sum("points")),
            "points_by_action_type": list(
                earned
                .values("action_type")
                .annotate(points=Sum("points"), count=Count("id"))
                .order_by("-points", "action_type")
            ),
            "top_users_by_points": list(
                User.objects
                .filter(reward_points__gt=0)
                .order_by("-reward_points", "id")
                .values("id", "full_name", "email", "reward_points")[:TOP_LIMIT]
            ),
        }

    @staticmethod
    def reward_rows(history):
        yield ["Date", "Customer", "Email", "Type", "Action", "Points", "Description"]

        for entry in history:
            yield [
                timezone.localtime(entry.created_at).strftime("%Y-%m-%d %H:%M"),
                entry.user.full_name,
                entry.user.email,
                entry.type,
                entry.action_type,
                entry.points,
                entry.description,
            ]

    # ----------------------------------
    # ADMIN ACTIVITY
    # ----------------------------------
    @classmethod
    def admin_logs(cls, start_date=None, end_date=None, admin_id=None):
        start_date, end_date = cls.default_range(start_date, end_date)

        logs = (
            AdminLog.objects
            .filter(created_at__date__gte=start_date, created_at__date__lte=end_date)
            .select_related("admin")
        )
        if admin_id:
            logs = logs.filter(admin_id=admin_id)

        return logs

    @classmethod
    def admin_activity(cls, logs, group_by="day"):
        return {
            "total_activities": logs.count(),
            "activity_by_date": cls._by_period(logs, "created_at", group_by, count=Count("id")),
            "activity_by_action_type": list(
                logs.values("action_type").annotate(count=Count("id")).order_by("-count", "action_type")
            ),
            "activity_by_entity_type": list(
                logs.values("entity_type").annotate(count=Count("id")).order_by("-count", "entity_type")
            ),
            "most_active_admins": list(
                logs
                .values("admin_id", "admin__full_name", "admin__email")
                .annotate(count=Count("id"))
                .order_by("-count", "admin_id")[:TOP_LIMIT]
            ),
        }

    @staticmethod
    def admin_log_rows(logs):
        yield ["Date", "Admin", "Action", "Entity", "Entity ID", "Details"]

        for log in logs:
            yield [
                timezone.localtime(log.created_at).strftime("%Y-%m-%d %H:%M"),
                log.admin.email if log.admin else "",
                log.action_type,
                log.entity_type,
                log.entity_id or "",
                json.dumps(log.details, ensure_ascii=False),
            ]
