import logging
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db.models import Count
from django.utils import timezone

from Court.constants import BookingStatus
from Court.models import Booking
from Court.service import BookingService
from Notifications.services import NotificationService
from Promotions.services import PromotionService
from Rewards.constants import ActionType, MONTHLY_LOYALTY_MIN_BOOKINGS
from Rewards.services import RewardService

logger = logging.getLogger(__name__)

User = get_user_model()


def month_start(moment):
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def previous_month_start(moment):
    first = month_start(moment)
    if first.month == 1:
        return first.replace(year=first.year - 1, month=12)
    return first.replace(month=first.month - 1)


class ScheduledTaskService:
    """
    Periodic jobs. Run from cron through `manage.py run_scheduled_tasks`
    or triggered by an admin from the dashboard.
    """

    @classmethod
    def task_map(cls):
        return {
            "birthday_rewards": cls.process_birthday_rewards,
            "promotion_expiry": PromotionService.notify_expiring,
            "points_expiry": RewardService.expire_points,
            "loyalty_promotions": lambda: len(PromotionService.process_loyalty_promotions()),
            "weekly_summaries": cls.process_weekly_summaries,
            "monthly_loyalty_points": cls.process_monthly_loyalty_points,
            "monthly_summaries": cls.process_monthly_summaries,
            "complete_bookings": BookingService.complete_past_bookings,
        }

    @classmethod
    def run(cls, task_name):
        tasks = cls.task_map()
        if task_name not in tasks:
            raise KeyError(task_name)

        logger.info("Running scheduled task %s", task_name)
        result = tasks[task_name]()
        logger.info("Scheduled task %s finished: %s", task_name, result)
        return result

    @classmethod
    def run_daily(cls):
        return {
            name: cls.run(name)
            for name in ("complete_bookings", "birthday_rewards", "promotion_expiry", "points_expiry")
        }

    @classmethod
    def run_weekly(cls):
        return {name: cls.run(name) for name in ("loyalty_promotions", "weekly_summaries")}

    @classmethod
    def run_monthly(cls):
        return {name: cls.run(name) for name in ("monthly_loyalty_points", "monthly_summaries")}

    # -----------------------------------------------------
    # INDIVIDUAL TASKS
    # -----------------------------------------------------
    @staticmethod
    def process_birthday_rewards():
        today = timezone.localdate()
        users = User.objects.filter(
            is_active=True,
            birth_date__month=today.month,
            birth_date__day=today.day,
        )

        processed = 0
        for user in users:
            RewardService.award_points(
                user,
                ActionType.BIRTHDAY,
                description="Earned bonus points on your birthday",
            )
            PromotionService.create_birthday_promotion(user)
            processed += 1

        return processed

    @staticmethod
    def _send_summaries(start, end, period):
        sent = 0
        for user in User.objects.filter(is_active=True, role=User.CUSTOMER):
            earned = RewardService.points_earned_between(user, start, end)
            if not earned:
                continue

            NotificationService.reward_summary(user, earned, period)
            sent += 1

        return sent

    @classmethod
    def process_weekly_summaries(cls):
        now = timezone.now()
        return cls._send_summaries(now - timedelta(days=7), now, "this week")

    @classmethod
    def process_monthly_summaries(cls):
        now = timezone.localtime()
        return cls._send_summaries(previous_month_start(now), month_start(now), "last month")

    @staticmethod
    def process_monthly_loyalty_points():
        now = timezone.localtime()
        start, end = previous_month_start(now), month_start(now)

        counts = (
            Booking.objects
            .filter(start_time__gte=start, start_time__lt=end)
            .exclude(status=BookingStatus.CANCELLED)
            .values("user_id")
            .annotate(total=Count("id"))
            .filter(total__gte=MONTHLY_LOYALTY_MIN_BOOKINGS)
        )

        awarded = 0
        for row in counts:
            user = User.objects.get(pk=row["user_id"])
            entry = RewardService.award_points(
                user,
                ActionType.MONTHLY_LOYALTY,
                description=f"Earned loyalty points for bookings in {start:%m/%Y}",
            )
            if entry is not None:
                awarded += 1

        return awarded
