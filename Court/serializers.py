from datetime import timedelta

from django.utils import timezone
from rest_framework import serializers

from slots.serializers import TimeslotSerializer
from slots.services import timeslots_for_date

from .constants import (
    BookingStatus,
    DEFAULT_NEEDED_PLAYERS,
    MAX_PLAYERS_PER_BOOKING,
    PaymentGateway,
    PaymentMethod,
    SkillLevel,
)
from .models import Booking, BookingJoinRequest, BookingPlayer, Court, Payment


# =========================================================
# COURTS
# =========================================================
class CourtSerializer(serializers.ModelSerializer):
    owner_name = serializers.CharField(source="owner.full_name", read_only=True)

    class Meta:
        model = Court
        fields = [
            "id",
            "owner",
            "owner_name",
            "name",
            "description",
            "image",
            "location",
            "district",
            "district_name",
            "hourly_rate",
            "skill_level",
            "is_available",
            "status",
            "created_at",
        ]
        read_only_fields = ("owner", "image", "status", "created_at")

    def validate_hourly_rate(self, value):
        if value <= 0:
            raise serializers.ValidationError("Hourly rate must be greater than zero")
        return value


class CourtDetailSerializer(CourtSerializer):
    upcoming_timeslots = serializers.SerializerMethodField()

    class Meta(CourtSerializer.Meta):
        fields = CourtSerializer.Meta.fields + ["upcoming_timeslots"]

    def get_upcoming_timeslots(self, obj):
        today = timezone.localdate()
        return {
            day.isoformat(): TimeslotSerializer(
                timeslots_for_date(obj, day, only_available=True), many=True
            ).data
            for day in (today + timedelta(days=offset) for offset in range(7))
        }


class CourtSearchSerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True)
    location = serializers.CharField(required=False, allow_blank=True)
    district = serializers.CharField(required=False, allow_blank=True)
    skill_level = serializers.ChoiceField(choices=SkillLevel.CHOICES, required=False)
    min_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    max_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)


class CourtImageUploadSerializer(serializers.Serializer):
    image = serializers.ImageField()


# =========================================================
# BOOKINGS
# =========================================================
class BookingPlayerSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(source="user.full_name", read_only=True)

    class Meta:
        model = BookingPlayer
        fields = ["id", "user", "full_name", "is_booker", "players_count", "joined_at"]


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "booking",
            "amount",
            "currency",
            "payment_method",
            "payment_gateway",
            "transaction_id",
            "status",
            "refund_status",
            "refund_reason",
            "paid_at",
            "created_at",
        ]
        read_only_fields = fields


class BookingSerializer(serializers.ModelSerializer):
    court_name = serializers.CharField(source="court.name", read_only=True)
    court_location = serializers.CharField(source="court.location", read_only=True)
    user_name = serializers.CharField(source="user.full_name", read_only=True)
    promotion_code = serializers.CharField(source="promotion.code", read_only=True, default=None)
    spots_available = serializers.IntegerField(read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "court",
            "court_name",
            "court_location",
            "user",
            "user_name",
            "start_time",
            "end_time",
            "total_price",
            "discount_amount",
            "promotion_code",
            "status",
            "skill_level",
            "current_players",
            "needed_players",
            "spots_available",
            "allow_join",
            "created_at",
        ]
        read_only_fields = fields


class BookingDetailSerializer(BookingSerializer):
    payments = PaymentSerializer(many=True, read_only=True)
    players = BookingPlayerSerializer(many=True, read_only=True)

    class Meta(BookingSerializer.Meta):
        fields = BookingSerializer.Meta.fields + ["payments", "players", "admin_notes"]
        read_only_fields = fields


class BookingCreateSerializer(serializers.Serializer):
    court_id = serializers.IntegerField()
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    promotion_code = serializers.CharField(required=False, allow_blank=True)

    # Open play
    allow_join = serializers.BooleanField(default=False)
    needed_players = serializers.IntegerField(
        min_value=1, max_value=MAX_PLAYERS_PER_BOOKING, default=DEFAULT_NEEDED_PLAYERS
    )
    current_players = serializers.IntegerField(
        min_value=1, max_value=MAX_PLAYERS_PER_BOOKING, default=1
    )
    skill_level = serializers.ChoiceField(choices=SkillLevel.CHOICES, default=SkillLevel.ALL_LEVELS)

    # -----------------------------------------------------
    # BUSINESS RULE VALIDATION (NO DB WRITES HERE)
    # -----------------------------------------------------
    def validate(self, data):
        if data["start_time"] >= data["end_time"]:
            raise serializers.ValidationError({"end_time": "End time must be after start time"})

        if data["start_time"] <= timezone.now():
            raise serializers.ValidationError({"start_time": "Cannot book a time in the past"})

        if data["current_players"] > data["needed_players"]:
            raise serializers.ValidationError(
                {"current_players": "Current players cannot exceed needed players"}
            )

        return data


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BookingStatus.CHOICES)
    admin_notes = serializers.CharField(required=False, allow_blank=True)


# =========================================================
# PAYMENTS
# =========================================================
class ProcessPaymentSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()
    payment_method = serializers.ChoiceField(choices=PaymentMethod.CHOICES)
    payment_gateway = serializers.ChoiceField(
        choices=PaymentGateway.CHOICES, required=False, allow_blank=True, default=""
    )

    def validate(self, data):
        if data["payment_method"] == PaymentMethod.ONLINE and not data.get("payment_gateway"):
            raise serializers.ValidationError(
                {"payment_gateway": "A gateway is required for online payments"}
            )
        return data


class CancellationRequestSerializer(serializers.Serializer):
    reason = serializers.CharField()


# =========================================================
# OPEN PLAY
# =========================================================
class JoinableQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    skill_level = serializers.ChoiceField(choices=SkillLevel.CHOICES, required=False)
    location = serializers.CharField(required=False, allow_blank=True)
    min_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    max_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    players_needed = serializers.IntegerField(min_value=1, required=False)


class JoinableBookingSerializer(BookingSerializer):
    players = BookingPlayerSerializer(many=True, read_only=True)
    hourly_rate = serializers.DecimalField(
        source="court.hourly_rate", max_digits=10, decimal_places=2, read_only=True
    )

    class Meta(BookingSerializer.Meta):
        fields = BookingSerializer.Meta.fields + ["players", "hourly_rate"]
        read_only_fields = fields


class JoinRequestCreateSerializer(serializers.Serializer):
    players_count = serializers.IntegerField(min_value=1, max_value=MAX_PLAYERS_PER_BOOKING, default=1)
    message = serializers.CharField(required=False, allow_blank=True, default="")


class JoinRequestSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source="user.full_name", read_only=True)
    booking_start = serializers.DateTimeField(source="booking.start_time", read_only=True)
    court_name = serializers.CharField(source="booking.court.name", read_only=True)

    class Meta:
        model = BookingJoinRequest
        fields = [
            "id",
            "booking",
            "user",
            "user_name",
            "court_name",
            "booking_start",
            "players_count",
            "message",
            "status",
            "created_at",
        ]
        read_only_fields = fields


class JoinRespondSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=(("approve", "Approve"), ("reject", "Reject")))
