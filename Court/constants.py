# Court/constants.py
from datetime import time


class CourtStatus:
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"

    CHOICES = (
        (ACTIVE, "Active"),
        (INACTIVE, "Inactive"),
        (MAINTENANCE, "Maintenance"),
    )


class SkillLevel:
    ALL_LEVELS = "allLevels"
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    CHOICES = (
        (ALL_LEVELS, "All Levels"),
        (BEGINNER, "Beginner"),
        (INTERMEDIATE, "Intermediate"),
        (ADVANCED, "Advanced"),
    )


class BookingStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    CHOICES = (
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (CANCELLED, "Cancelled"),
        (COMPLETED, "Completed"),
    )

    # Allowed lifecycle moves; cancelled and completed are terminal
    TRANSITIONS = {
        PENDING: {CONFIRMED, CANCELLED},
        CONFIRMED: {COMPLETED, CANCELLED},
        CANCELLED: set(),
        COMPLETED: set(),
    }


class JoinRequestStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    CHOICES = (
        (PENDING, "Pending"),
        (APPROVED, "Approved"),
        (REJECTED, "Rejected"),
        (CANCELLED, "Cancelled"),
    )


class PaymentMethod:
    ONLINE = "online_payment"
    BANK_TRANSFER = "bank_transfer"

    CHOICES = (
        (ONLINE, "Online Payment"),
        (BANK_TRANSFER, "Bank Transfer"),
    )


class PaymentGateway:
    VNPAY = "vnpay"
    MOMO = "momo"

    CHOICES = (
        (VNPAY, "VNPay"),
        (MOMO, "MoMo"),
    )


class PaymentStatus:
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"

    CHOICES = (
        (PENDING, "Pending"),
        (COMPLETED, "Completed"),
        (FAILED, "Failed"),
        (REFUNDED, "Refunded"),
    )


class RefundStatus:
    NONE = "none"
    REQUESTED = "requested"
    REFUNDED = "refunded"

    CHOICES = (
        (NONE, "None"),
        (REQUESTED, "Requested"),
        (REFUNDED, "Refunded"),
    )


DEFAULT_NEEDED_PLAYERS = 4
MAX_PLAYERS_PER_BOOKING = 8

# Off-peak window used for rewards: before 09:00 or from 20:00
OFF_PEAK_BEFORE = time(9, 0)
OFF_PEAK_FROM = time(20, 0)
