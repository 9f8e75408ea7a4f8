import logging

from django.contrib.auth import get_user_model

from .constants import NotificationType
from .models import Notification

logger = logging.getLogger(__name__)

User = get_user_model()


class NotificationService:
    """
    Every notification the platform sends goes through here.
    Callers pass domain objects; message wording lives in one place.
    """

    @staticmethod
    def send(user, title, message, notification_type="", related=None, is_system=False):
        related_id = related.pk if related is not None else None
        related_type = related._meta.model_name if related is not None else ""

        notification = Notification.objects.create(
            user=user,
            title=title,
            message=message,
            type=notification_type,
            related_id=related_id,
            related_type=related_type,
            is_system=is_system,
        )
        logger.debug("Notification %s sent to user %s", notification.id, user.pk)
        return notification

    @staticmethod
    def send_many(users, title, message, notification_type=NotificationType.SYSTEM, is_system=False):
        notifications = [
            Notification(
                user=user,
                title=title,
                message=message,
                type=notification_type,
                is_system=is_system,
            )
            for user in users
        ]
        created = Notification.objects.bulk_create(notifications)
        logger.info("Broadcast '%s' to %s users", title, len(created))
        return created

    @classmethod
    def send_system(cls, title, message):
        users = User.objects.filter(is_active=True)
        return cls.send_many(users, title, message, NotificationType.SYSTEM, is_system=True)

    @classmethod
    def send_to_role(cls, role, title, message):
        users = User.objects.filter(is_active=True, role=role)
        return cls.send_many(users, title, message, NotificationType.SYSTEM, is_system=True)

    @staticmethod
    def unread_count(user):
        return Notification.objects.filter(user=user, is_read=False).count()

    @staticmethod
    def mark_all_read(user):
        return Notification.objects.filter(user=user, is_read=False).update(is_read=True)

    # -----------------------------------------------------
    # BOOKINGS
    # -----------------------------------------------------
    @classmethod
    def booking_created(cls, booking):
        return cls.send(
            booking.user,
            title="Booking Received",
            message=(
                f"Your booking at {booking.court.name} on "
                f"{booking.start_time:%Y-%m-%d %H:%M} is pending payment."
            ),
            notification_type=NotificationType.BOOKING_CREATED,
            related=booking,
        )

    @classmethod
    def booking_confirmed(cls, booking):
        return cls.send(
            booking.user,
            title="Booking Confirmed",
            message=(
                f"Your booking at {booking.court.name} on "
                f"{booking.start_time:%Y-%m-%d %H:%M} has been confirmed."
            ),
            notification_type=NotificationType.BOOKING_CONFIRMATION,
            related=booking,
        )

    @classmethod
    def booking_cancelled(cls, booking, recipient):
        return cls.send(
            recipient,
            title="Booking Cancelled",
            message=f"Booking #{booking.id} at {booking.court.name} has been cancelled.",
            notification_type=NotificationType.BOOKING_CANCELLED,
            related=booking,
        )

    @classmethod
    def booking_completed(cls, booking):
        return cls.send(
            booking.user,
            title="Booking Completed",
            message=(
                f"Your booking at {booking.court.name} has been marked as completed. "
                "You've earned reward points!"
            ),
            notification_type=NotificationType.BOOKING_COMPLETED,
            related=booking,
        )

    @classmethod
    def payment_confirmed(cls, payment):
        return cls.send(
            payment.user,
            title="Payment Confirmed",
            message=(
                f"Your payment of {payment.amount} {payment.currency} for booking "
                f"#{payment.booking_id} was successful."
            ),
            notification_type=NotificationType.PAYMENT_CONFIRMATION,
            related=payment,
        )

    @classmethod
    def payment_refunded(cls, payment):
        return cls.send(
            payment.user,
            title="Payment Refunded",
            message=f"Your payment for booking #{payment.booking_id} has been refunded.",
            notification_type=NotificationType.PAYMENT_REFUNDED,
            related=payment,
        )

    # -----------------------------------------------------
    # JOIN REQUESTS
    # -----------------------------------------------------
    @classmethod
    def join_request_received(cls, join_request):
        booking = join_request.booking
        return cls.send(
            booking.user,
            title="New Join Request",
            message=(
                f"{join_request.user.full_name} wants to join your booking at "
                f"{booking.court.name} with {join_request.players_count} player(s)."
            ),
            notification_type=NotificationType.JOIN_REQUEST,
            related=join_request,
        )

    @classmethod
    def join_request_answered(cls, join_request):
        booking = join_request.booking
        return cls.send(
            join_request.user,
            title=f"Join Request {join_request.status.title()}",
            message=(
                f"Your request to join the booking at {booking.court.name} on "
                f"{booking.start_time:%Y-%m-%d %H:%M} was {join_request.status}."
            ),
            notification_type=NotificationType.JOIN_REQUEST_RESPONSE,
            related=join_request,
        )

    # -----------------------------------------------------
    # REWARDS / PROMOTIONS
    # -----------------------------------------------------
    @classmethod
    def points_earned(cls, user, points, action_type):
        return cls.send(
            user,
            title="Reward Points Earned",
            message=f"You earned {points} points for {action_type.replace('_', ' ')}.",
            notification_type=NotificationType.REWARD_POINTS,
        )

    @classmethod
    def reward_redeemed(cls, user, reward):
        return cls.send(
            user,
            title="Reward Redeemed",
            message=f"You redeemed {reward.name} for {reward.points_required} points.",
            notification_type=NotificationType.REWARD_REDEMPTION,
            related=reward,
        )

    @classmethod
    def points_expired(cls, user, points):
        return cls.send(
            user,
            title="Reward Points Expired",
            message=f"{points} of your reward points have expired.",
            notification_type=NotificationType.POINTS_EXPIRY,
        )

    @classmethod
    def reward_summary(cls, user, points_earned, period):
        return cls.send(
            user,
            title="Reward Points Summary",
            message=(
                f"You earned {points_earned} points {period}. "
                f"Your balance is {user.reward_points} points."
            ),
            notification_type=NotificationType.REWARD_SUMMARY,
        )

    @classmethod
    def promotion_available(cls, user, promotion, message=None):
        return cls.send(
            user,
            title="New Promotion Available",
            message=message or (
                f"Use code {promotion.code} to get {promotion.discount_percent}% off."
            ),
            notification_type=NotificationType.PROMOTION,
            related=promotion,
        )

    @classmethod
    def promotion_expiring(cls, user, promotion, days_left):
        return cls.send(
            user,
            title="Promotion Expiring Soon",
            message=f"Your promotion code {promotion.code} expires in {days_left} day(s).",
            notification_type=NotificationType.PROMOTION_EXPIRY,
            related=promotion,
        )
