import logging
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.contrib.auth import get_user_model
from django.db.models import Count, F, Sum
from django.utils import timezone
from django.utils.crypto import get_random_string

from Court.constants import BookingStatus
from Court.models import Booking
from Notifications.constants import NotificationType
from Notifications.services import NotificationService
from .constants import (
    BIRTHDAY_DISCOUNT,
    BIRTHDAY_VALID_DAYS,
    EXPIRY_WARNING_DAYS,
    LOYALTY_LOOKBACK_DAYS,
    LOYALTY_MIN_BOOKINGS,
    LOYALTY_TIERS,
    LOYALTY_VALID_DAYS,
    PromotionType,
    REFERRAL_DISCOUNT,
    REFERRAL_VALID_DAYS,
    WELCOME_DISCOUNT,
    WELCOME_VALID_DAYS,
)
from .exceptions import InvalidPromotion
from .models import Promotion, PromotionUsage

logger = logging.getLogger(__name__)

User = get_user_model()

CODE_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


class PromotionService:

    @staticmethod
    def generate_code(length=8):
        return get_random_string(length, allowed_chars=CODE_CHARS)

    # -----------------------------------------------------
    # VERIFY / APPLY
    # -----------------------------------------------------
    @staticmethod
    def verify_code(code, user, lock=False):
        """
        Returns the promotion if `user` may use `code` right now,
        otherwise raises InvalidPromotion with the first failing reason.
        Pass lock=True inside a transaction to serialize usage-limit checks.
        """
        qs = Promotion.objects.all()
        if lock:
            qs = qs.select_for_update()

        promotion = qs.filter(code__iexact=code.strip()).first()

        if promotion is None:
            raise InvalidPromotion("Invalid promotion code")

        if not promotion.is_active:
            raise InvalidPromotion("Promotion is not active")

        now = timezone.now()
        if now < promotion.start_date:
            raise InvalidPromotion("Promotion has not started yet")

        if now > promotion.end_date:
            raise InvalidPromotion("Promotion has expired")

        if promotion.user_specific and promotion.specific_user_id != user.id:
            raise InvalidPromotion("This promotion code is not valid for your account")

        if promotion.usage_limit is not None:
            if promotion.usages.count() >= promotion.usage_limit:
                raise InvalidPromotion("Promotion usage limit has been reached")

        if promotion.usages.filter(user=user).exists():
            raise InvalidPromotion("You have already used this promotion")

        return promotion

    @staticmethod
    def calculate_discount(total_price, promotion):
        discount = Decimal(total_price) * Decimal(promotion.discount_percent) / Decimal(100)
        return discount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @staticmethod
    def record_usage(promotion, user, booking, discount_amount):
        usage = PromotionUsage.objects.create(
            promotion=promotion,
            user=user,
            booking=booking,
            discount_amount=discount_amount,
        )
        Promotion.objects.filter(pk=promotion.pk).update(usage_count=F("usage_count") + 1)

        logger.info(
            "Promotion %s used by user %s on booking %s",
            promotion.code, user.id, booking.id if booking else None
        )
        return usage

    @staticmethod
    def track_view(code):
        return Promotion.objects.filter(code__iexact=code).update(view_count=F("view_count") + 1)

    @staticmethod
    def active_for_user(user):
        now = timezone.now()
        qs = Promotion.objects.filter(
            is_active=True,
            start_date__lte=now,
            end_date__gte=now,
        )
        public = qs.filter(user_specific=False)
        personal = qs.filter(user_specific=True, specific_user=user)
        return (public | personal).exclude(usages__user=user).distinct()

    # -----------------------------------------------------
    # CREATION
    # -----------------------------------------------------
    @classmethod
    def create_promotion(cls, **data):
        if not data.get("code"):
            data["code"] = cls.generate_code()

        promotion = Promotion.objects.create(**data)
        logger.info("Promotion %s created (%s)", promotion.code, promotion.promotion_type)
        return promotion

    @classmethod
    def _create_personal(cls, user, prefix, percent, days, promotion_type, description, title, message):
        now = timezone.now()
        promotion = cls.create_promotion(
            code=f"{prefix}{user.id}{cls.generate_code(4)}",
            description=description,
            discount_percent=percent,
            start_date=now,
            end_date=now + timedelta(days=days),
            is_active=True,
            user_specific=True,
            specific_user=user,
            usage_limit=1,
            promotion_type=promotion_type,
        )

        NotificationService.send(
            user,
            title=title,
            message=message.replace("{code}", promotion.code),
            notification_type=NotificationType.PROMOTION,
            related=promotion,
        )
        return promotion

    @classmethod
    def create_welcome_promotion(cls, user):
        return cls._create_personal(
            user,
            prefix="WELCOME",
            percent=WELCOME_DISCOUNT,
            days=WELCOME_VALID_DAYS,
            promotion_type=PromotionType.WELCOME,
            description="Welcome to Pickleball Booking! Enjoy a discount on your first booking.",
            title="Welcome Gift",
            message=f"Welcome to Pickleball Booking! Use code {{code}} to get {WELCOME_DISCOUNT}% off your first booking.",
        )

    @classmethod
    def create_birthday_promotion(cls, user):
        return cls._create_personal(
            user,
            prefix="BDAY",
            percent=BIRTHDAY_DISCOUNT,
            days=BIRTHDAY_VALID_DAYS,
            promotion_type=PromotionType.BIRTHDAY,
            description=f"Happy Birthday, {user.full_name}! Enjoy a special discount on your next booking.",
            title="Birthday Gift",
            message=(
                f"Happy Birthday! We've sent you a special {BIRTHDAY_DISCOUNT}% discount code: "
                f"{{code}}. Valid for {BIRTHDAY_VALID_DAYS} days."
            ),
        )

    @classmethod
    def create_referral_promotion(cls, referrer, referred):
        return cls._create_personal(
            referred,
            prefix=f"REF{referrer.id}",
            percent=REFERRAL_DISCOUNT,
            days=REFERRAL_VALID_DAYS,
            promotion_type=PromotionType.REFERRAL,
            description=f"Referral discount from {referrer.full_name}.",
            title="Referral Discount",
            message=(
                f"You've been referred by {referrer.full_name}! Use code {{code}} "
                f"to get {REFERRAL_DISCOUNT}% off your next booking."
            ),
        )

    @staticmethod
    def loyalty_discount(booking_count):
        for minimum, percent in LOYALTY_TIERS:
            if booking_count >= minimum:
                return percent
        return LOYALTY_TIERS[-1][1]

    @classmethod
    def create_loyalty_promotion(cls, user, booking_count):
        percent = cls.loyalty_discount(booking_count)
        return cls._create_personal(
            user,
            prefix="LOYAL",
            percent=percent,
            days=LOYALTY_VALID_DAYS,
            promotion_type=PromotionType.LOYALTY,
            description=f"Thank you for your loyalty! Enjoy a {percent}% discount on your next booking.",
            title="Loyalty Reward",
            message=(
                "Thank you for being a loyal customer! Use code {code} "
                f"to get {percent}% off your next booking."
            ),
        )

    @classmethod
    def create_seasonal_promotion(cls, season, discount_percent, start_date, end_date,
                                  promotion_type=PromotionType.SEASONAL):
        name = season.strip().title()
        prefix = "OFFPEAK" if promotion_type == PromotionType.OFF_PEAK else season.upper().replace(" ", "")

        if promotion_type == PromotionType.OFF_PEAK:
            description = (
                f"{name}: Book during off-peak hours (before 9 AM or after 8 PM) "
                f"and save {discount_percent}%!"
            )
        else:
            description = f"{name} Special: Enjoy a discount on all bookings!"

        promotion = cls.create_promotion(
            code=f"{prefix}{cls.generate_code(6)}",
            description=description,
            discount_percent=discount_percent,
            start_date=start_date,
            end_date=end_date,
            is_active=True,
            user_specific=False,
            usage_limit=None,
            promotion_type=promotion_type,
        )

        NotificationService.send_many(
            User.objects.filter(is_active=True),
            title=f"{name} Special Offer",
            message=(
                f"Use code {promotion.code} to get {discount_percent}% off your bookings "
                f"until {end_date:%Y-%m-%d}."
            ),
            notification_type=NotificationType.PROMOTION,
            is_system=True,
        )
        return promotion

    # -----------------------------------------------------
    # SCHEDULED
    # -----------------------------------------------------
    @classmethod
    def process_loyalty_promotions(cls):
        now = timezone.now()
        since = now - timedelta(days=LOYALTY_LOOKBACK_DAYS)
        created = []

        users_with_loyalty = Promotion.objects.filter(
            promotion_type=PromotionType.LOYALTY,
            is_active=True,
            end_date__gt=now,
            specific_user__isnull=False,
        ).values_list("specific_user_id", flat=True)

        counts = (
            Booking.objects
            .filter(start_time__gte=since, start_time__lte=now)
            .exclude(status=BookingStatus.CANCELLED)
            .exclude(user_id__in=users_with_loyalty)
            .values("user_id")
            .annotate(total=Count("id"))
            .filter(total__gte=LOYALTY_MIN_BOOKINGS)
        )

        for row in counts:
            user = User.objects.get(pk=row["user_id"])
            if not user.is_active:
                continue
            created.append(cls.create_loyalty_promotion(user, row["total"]))

        logger.info("Loyalty promotions created: %s", len(created))
        return created

    @staticmethod
    def notify_expiring():
        now = timezone.now()
        expiring = Promotion.objects.filter(
            is_active=True,
            user_specific=True,
            end_date__gt=now,
            end_date__lte=now + timedelta(days=EXPIRY_WARNING_DAYS),
        ).select_related("specific_user")

        sent = 0
        for promotion in expiring:
            if promotion.usages.filter(user=promotion.specific_user).exists():
                continue

            days_left = max((promotion.end_date - now).days, 1)
            NotificationService.promotion_expiring(promotion.specific_user, promotion, days_left)
            sent += 1

        return sent

    # -----------------------------------------------------
    # REPORTING
    # -----------------------------------------------------
    @staticmethod
    def statistics(promotion):
        stats = promotion.usages.aggregate(
            usage_count=Count("id"),
            total_discount=Sum("discount_amount"),
            unique_users=Count("user", distinct=True),
        )

        conversion = 0
        if promotion.view_count:
            conversion = stats["usage_count"] / promotion.view_count * 100

        recent = promotion.usages.select_related("user")[:10]

        return {
            "usage_count": stats["usage_count"],
            "total_discount": stats["total_discount"] or Decimal("0"),
            "unique_users": stats["unique_users"],
            "conversion_rate": f"{conversion:.2f}%",
            "recent_usages": [
                {
                    "user_id": usage.user_id,
                    "user_email": usage.user.email,
                    "booking_id": usage.booking_id,
                    "discount_amount": usage.discount_amount,
                    "used_at": usage.used_at,
                }
                for usage in recent
            ],
        }
