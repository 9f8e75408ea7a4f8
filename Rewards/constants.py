# Rewards/constants.py


class HistoryType:
    EARNING = "earning"
    REDEMPTION = "redemption"
    EXPIRATION = "expiration"
    ADJUSTMENT = "adjustment"

    CHOICES = (
        (EARNING, "Earning"),
        (REDEMPTION, "Redemption"),
        (EXPIRATION, "Expiration"),
        (ADJUSTMENT, "Adjustment"),
    )


class ActionType:
    BOOKING_COMPLETED = "booking_completed"
    FIRST_BOOKING = "first_booking"
    OFF_PEAK_BOOKING = "off_peak_booking"
    CONSECUTIVE_BOOKINGS = "consecutive_bookings"
    REFERRAL = "referral"
    BIRTHDAY = "birthday"
    MONTHLY_LOYALTY = "monthly_loyalty"

    CHOICES = (
        (BOOKING_COMPLETED, "Booking completed"),
        (FIRST_BOOKING, "First booking"),
        (OFF_PEAK_BOOKING, "Off-peak booking"),
        (CONSECUTIVE_BOOKINGS, "Consecutive bookings"),
        (REFERRAL, "Referral"),
        (BIRTHDAY, "Birthday"),
        (MONTHLY_LOYALTY, "Monthly loyalty"),
    )


CONSECUTIVE_WINDOW_DAYS = 30
CONSECUTIVE_MIN_BOOKINGS = 3
MONTHLY_LOYALTY_MIN_BOOKINGS = 3
