# Promotions/constants.py


class PromotionType:
    GENERAL = "general"
    WELCOME = "welcome"
    BIRTHDAY = "birthday"
    SEASONAL = "seasonal"
    REFERRAL = "referral"
    LOYALTY = "loyalty"
    OFF_PEAK = "off_peak"

    CHOICES = (
        (GENERAL, "General"),
        (WELCOME, "Welcome"),
        (BIRTHDAY, "Birthday"),
        (SEASONAL, "Seasonal"),
        (REFERRAL, "Referral"),
        (LOYALTY, "Loyalty"),
        (OFF_PEAK, "Off-peak"),
    )


WELCOME_DISCOUNT = 15
WELCOME_VALID_DAYS = 30

BIRTHDAY_DISCOUNT = 20
BIRTHDAY_VALID_DAYS = 7

REFERRAL_DISCOUNT = 10
REFERRAL_VALID_DAYS = 60

LOYALTY_VALID_DAYS = 30
LOYALTY_LOOKBACK_DAYS = 90
LOYALTY_MIN_BOOKINGS = 5

# (minimum bookings, discount percent), highest first
LOYALTY_TIERS = (
    (20, 20),
    (10, 15),
    (5, 10),
    (0, 5),
)

EXPIRY_WARNING_DAYS = 3
