import logging
import math
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F, Sum
from django.utils import timezone

from Court.constants import BookingStatus, OFF_PEAK_BEFORE, OFF_PEAK_FROM
from Court.models import Booking
from Notifications.services import NotificationService
from .constants import (
    ActionType,
    CONSECUTIVE_MIN_BOOKINGS,
    CONSECUTIVE_WINDOW_DAYS,
    HistoryType,
)
from .exceptions import InsufficientPoints, RewardUnavailable
from .models import Reward, RewardHistory, RewardRule

logger = logging.getLogger(__name__)

User = get_user_model()


class RewardService:

    # -----------------------------------------------------
    # POINTS CALCULATION
    # -----------------------------------------------------
    @staticmethod
    def calculate_points(action_type, amount=0):
        rule = RewardRule.objects.filter(action_type=action_type).first()

        if rule is None or not rule.is_active:
            return 0

        amount = Decimal(amount or 0)

        if rule.min_amount is not None and amount < rule.min_amount:
            return 0

        points = rule.points
        if rule.is_percentage:
            points = math.floor(amount * rule.points / 100)

        if rule.max_points is not None and points > rule.max_points:
            points = rule.max_points

        return int(points)

    # -----------------------------------------------------
    # LEDGER WRITES
    # -----------------------------------------------------
    @staticmethod
    def _write(user, points, entry_type, action_type="", description="", source=None):
        with transaction.atomic():
            User.objects.filter(pk=user.pk).update(reward_points=F("reward_points") + points)

            entry = RewardHistory.objects.create(
                user=user,
                points=points,
                type=entry_type,
                action_type=action_type,
                description=description,
                source_id=source.pk if source is not None else None,
                source_type=source._meta.model_name if source is not None else "",
            )

        user.refresh_from_db(fields=["reward_points"])
        return entry

    @classmethod
    def award_points(cls, user, action_type, amount=0, source=None, description=""):
        """
        Awards the points the active rule for `action_type` yields.
        Returns the ledger entry, or None when nothing was earned.
        """
        points = cls.calculate_points(action_type, amount)
        if points <= 0:
            return None

        entry = cls._write(
            user,
            points,
            HistoryType.EARNING,
            action_type=action_type,
            description=description or f"Earned {points} points for {action_type}",
            source=source,
        )

        NotificationService.points_earned(user, points, action_type)
        logger.info("User %s earned %s points (%s)", user.pk, points, action_type)
        return entry

    @classmethod
    def adjust_points(cls, user, points, description=""):
        """
        Manual admin award (positive) or deduction (negative).
        A deduction never takes the balance below zero.
        """
        with transaction.atomic():
            locked = User.objects.select_for_update().get(pk=user.pk)
            if points < 0 and locked.reward_points < -points:
                raise InsufficientPoints()

            entry = cls._write(
                locked,
                points,
                HistoryType.ADJUSTMENT,
                description=description or "Manual adjustment",
            )

        user.reward_points = locked.reward_points
        logger.info("Reward points adjusted by %s for user %s", points, user.pk)
        return entry

    @classmethod
    def redeem(cls, user, reward):
        with transaction.atomic():
            locked = User.objects.select_for_update().get(pk=user.pk)

            if not reward.is_active:
                raise RewardUnavailable()

            if locked.reward_points < reward.points_required:
                raise InsufficientPoints()

            entry = cls._write(
                locked,
                -reward.points_required,
                HistoryType.REDEMPTION,
                description=f"Redeemed: {reward.name}",
                source=reward,
            )

        user.reward_points = locked.reward_points
        NotificationService.reward_redeemed(user, reward)
        logger.info("User %s redeemed reward %s", user.pk, reward.pk)

        return {
            "redemption": entry,
            "reward": reward,
            "remaining_points": locked.reward_points,
        }

    # -----------------------------------------------------
    # BOOKING REWARDS
    # -----------------------------------------------------
    @staticmethod
    def is_off_peak(start_time):
        local_time = timezone.localtime(start_time).time()
        return local_time < OFF_PEAK_BEFORE or local_time >= OFF_PEAK_FROM

    @classmethod
    def process_booking_rewards(cls, booking):
        """
        Points for a completed booking. Returns the ledger entries created.
        """
        user = booking.user
        entries = []

        entries.append(cls.award_points(
            user,
            ActionType.BOOKING_COMPLETED,
            amount=booking.total_price,
            source=booking,
            description=f"Earned points for completing booking #{booking.id}",
        ))

        already_first = RewardHistory.objects.filter(
            user=user, action_type=ActionType.FIRST_BOOKING
        ).exists()
        if not already_first:
            entries.append(cls.award_points(
                user,
                ActionType.FIRST_BOOKING,
                source=booking,
                description="Earned points for your first booking",
            ))

        if cls.is_off_peak(booking.start_time):
            entries.append(cls.award_points(
                user,
                ActionType.OFF_PEAK_BOOKING,
                source=booking,
                description="Earned points for booking during off-peak hours",
            ))

        entries.append(cls.award_consecutive_bookings(user))

        return [entry for entry in entries if entry is not None]

    @classmethod
    def award_consecutive_bookings(cls, user):
        now = timezone.now()

        completed = Booking.objects.filter(
            user=user,
            status=BookingStatus.COMPLETED,
            start_time__gte=now - timedelta(days=CONSECUTIVE_WINDOW_DAYS),
            start_time__lte=now,
        ).count()

        if completed < CONSECUTIVE_MIN_BOOKINGS:
            return None

        local_now = timezone.localtime(now)
        month_start = local_now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        # Once per calendar month
        if RewardHistory.objects.filter(
            user=user,
            action_type=ActionType.CONSECUTIVE_BOOKINGS,
            created_at__gte=month_start,
        ).exists():
            return None

        return cls.award_points(
            user,
            ActionType.CONSECUTIVE_BOOKINGS,
            description=f"Earned points for {completed} consecutive bookings this month",
        )

    # -----------------------------------------------------
    # EXPIRY
    # -----------------------------------------------------
    @classmethod
    def expire_points(cls, now=None):
        """
        Writes off earnings older than POINTS_EXPIRY_DAYS.
        Only what the user still holds is deducted.
        """
        now = now or timezone.now()
        cutoff = now - timedelta(days=settings.POINTS_EXPIRY_DAYS)

        stale = RewardHistory.objects.filter(
            type=HistoryType.EARNING,
            expired=False,
            created_at__lt=cutoff,
        )

        totals = stale.values("user_id").annotate(total=Sum("points"))
        expired_users = 0

        for row in totals:
            with transaction.atomic():
                user = User.objects.select_for_update().get(pk=row["user_id"])
                points = min(row["total"], user.reward_points)

                stale.filter(user=user).update(expired=True)

                if points <= 0:
                    continue

                cls._write(
                    user,
                    -points,
                    HistoryType.EXPIRATION,
                    description=f"{points} points expired",
                )

            NotificationService.points_expired(user, points)
            expired_users += 1

        logger.info("Points expired for %s users", expired_users)
        return expired_users

    # -----------------------------------------------------
    # READS
    # -----------------------------------------------------
    @staticmethod
    def summary(user):
        user.refresh_from_db(fields=["reward_points"])
        current = user.reward_points

        history = RewardHistory.objects.filter(user=user)
        earned = history.filter(type=HistoryType.EARNING).aggregate(total=Sum("points"))["total"] or 0
        redeemed = history.filter(type=HistoryType.REDEMPTION).aggregate(total=Sum("points"))["total"] or 0

        rewards = Reward.objects.filter(is_active=True)
        redeemable = rewards.filter(points_required__lte=current)
        upcoming = list(rewards.filter(points_required__gt=current).order_by("points_required")[:3])

        next_reward = upcoming[0] if upcoming else None

        return {
            "current_points": current,
            "total_points_earned": earned,
            "total_points_redeemed": abs(redeemed),
            "recent_history": history[:5],
            "redeemable_rewards": redeemable,
            "next_rewards": upcoming,
            "next_reward": next_reward,
            "points_to_next_reward": (
                next_reward.points_required - current if next_reward else None
            ),
        }

    @staticmethod
    def points_earned_between(user, start, end):
        return RewardHistory.objects.filter(
            user=user,
            type=HistoryType.EARNING,
            created_at__gte=start,
            created_at__lt=end,
        ).aggregate(total=Sum("points"))["total"] or 0
