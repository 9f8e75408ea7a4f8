from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from .constants import (
    BookingStatus,
    CourtStatus,
    DEFAULT_NEEDED_PLAYERS,
    JoinRequestStatus,
    PaymentGateway,
    PaymentMethod,
    PaymentStatus,
    RefundStatus,
    SkillLevel,
)


# =========================
# COURT (BUSINESS ASSET)
# =========================

class Court(models.Model):
    """
    A bookable pickleball court.
    Owned by an approved court owner.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="courts"
    )

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    image = models.ImageField(upload_to="court_images/", blank=True, null=True)

    location = models.CharField(max_length=255)
    district = models.CharField(max_length=100)
    district_name = models.CharField(max_length=100, blank=True)

    # Fallback price when no timeslot price applies
    hourly_rate = models.DecimalField(max_digits=10, decimal_places=2)

    skill_level = models.CharField(
        max_length=20,
        choices=SkillLevel.CHOICES,
        default=SkillLevel.ALL_LEVELS
    )

    # Owner toggle; admins use status for moderation
    is_available = models.BooleanField(default=True)
    status = models.CharField(
        max_length=20,
        choices=CourtStatus.CHOICES,
        default=CourtStatus.ACTIVE
    )
    admin_notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    @property
    def is_bookable(self):
        return self.is_available and self.status == CourtStatus.ACTIVE

    def __str__(self):
        return self.name


# =========================
# BOOKING MODEL
# =========================

class Booking(models.Model):
    """
    A reservation of a court for a time range.
    Two non-cancelled bookings of the same court never overlap.
    """

    court = models.ForeignKey(
        Court,
        on_delete=models.CASCADE,
        related_name="bookings"
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings"
    )

    start_time = models.DateTimeField()
    end_time = models.DateTimeField()

    # Pricing snapshot at booking time
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    promotion = models.ForeignKey(
        "Promotions.Promotion",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings"
    )

    status = models.CharField(
        max_length=20,
        choices=BookingStatus.CHOICES,
        default=BookingStatus.PENDING
    )

    # Open play: other players may ask to join
    skill_level = models.CharField(
        max_length=20,
        choices=SkillLevel.CHOICES,
        default=SkillLevel.ALL_LEVELS
    )
    current_players = models.PositiveSmallIntegerField(default=1)
    needed_players = models.PositiveSmallIntegerField(default=DEFAULT_NEEDED_PLAYERS)
    allow_join = models.BooleanField(default=False)

    admin_notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_time"]
        indexes = [
            models.Index(fields=["court", "start_time"]),
            models.Index(fields=["user", "status"]),
        ]
        constraints = [
            # Last line of defence against double booking under concurrency
            models.UniqueConstraint(
                fields=["court", "start_time", "end_time"],
                condition=~Q(status=BookingStatus.CANCELLED),
                name="unique_active_booking_per_court_slot",
            ),
            models.CheckConstraint(
                condition=Q(end_time__gt=F("start_time")),
                name="booking_end_after_start",
            ),
            models.CheckConstraint(
                condition=Q(current_players__lte=F("needed_players")),
                name="booking_players_within_limit",
            ),
        ]

    def clean(self):
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValidationError("End time must be after start time")

        if self.current_players > self.needed_players:
            raise ValidationError("Current players cannot exceed needed players")

    @property
    def duration_hours(self):
        return (self.end_time - self.start_time).total_seconds() / 3600

    @property
    def spots_available(self):
        return max(self.needed_players - self.current_players, 0)

    def can_transition_to(self, new_status):
        return new_status in BookingStatus.TRANSITIONS.get(self.status, set())

    def __str__(self):
        return f"{self.court} | {self.start_time:%Y-%m-%d %H:%M} | {self.status}"


# =========================
# OPEN PLAY (JOIN EXISTING BOOKING)
# =========================

class BookingPlayer(models.Model):
    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name="players"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="joined_bookings"
    )
    is_booker = models.BooleanField(default=False)
    players_count = models.PositiveSmallIntegerField(default=1)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("booking", "user")
        ordering = ["joined_at"]

    def __str__(self):
        return f"{self.user} in booking {self.booking_id}"


class BookingJoinRequest(models.Model):
    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name="join_requests"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="join_requests"
    )
    players_count = models.PositiveSmallIntegerField(default=1)
    message = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=JoinRequestStatus.CHOICES,
        default=JoinRequestStatus.PENDING
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["booking", "user"],
                condition=Q(status=JoinRequestStatus.PENDING),
                name="unique_pending_join_request",
            ),
        ]

    def __str__(self):
        return f"Join request {self.id} ({self.status})"


# =========================
# PAYMENT MODEL
# =========================

class Payment(models.Model):
    """
    A payment recorded against a booking.
    Gateway calls are out of scope; online payments are recorded as completed.
    """

    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name="payments"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="payments"
    )

    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=10, default="VND")

    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.CHOICES
    )
    payment_gateway = models.CharField(
        max_length=20,
        choices=PaymentGateway.CHOICES,
        blank=True
    )

    # Gateway / manual transaction reference
    transaction_id = models.CharField(
        max_length=100,
        unique=True,
        null=True,
        blank=True
    )

    status = models.CharField(
        max_length=20,
        choices=PaymentStatus.CHOICES,
        default=PaymentStatus.PENDING
    )
    refund_status = models.CharField(
        max_length=20,
        choices=RefundStatus.CHOICES,
        default=RefundStatus.NONE
    )
    refund_reason = models.TextField(blank=True)

    # Free-form audit trail (cancellation requests, refunds)
    payment_data = models.JSONField(default=dict, blank=True)

    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.transaction_id or f"payment-{self.pk}"
