# dashboard/serializers.py
from rest_framework import serializers

from Accounts.models import User
from Court.constants import BookingStatus, CourtStatus, PaymentStatus
from Court.models import Court
from Court.serializers import BookingSerializer
from .models import AdminLog


class AdminProfileSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    email = serializers.EmailField()
    role = serializers.CharField()


class DashboardSerializer(serializers.Serializer):
    profile = AdminProfileSerializer()
    stats = serializers.DictField()
    recent_bookings = BookingSerializer(many=True)


# =========================================================
# USERS / COURT OWNERS
# =========================================================
class AdminUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "full_name",
            "phone_number",
            "location",
            "birth_date",
            "role",
            "approval_status",
            "id_card",
            "tax_code",
            "admin_notes",
            "reward_points",
            "two_factor_enabled",
            "is_active",
            "created_at",
        )
        read_only_fields = fields


class AdminUserDetailSerializer(AdminUserSerializer):
    bookings_count = serializers.IntegerField(source="bookings.count", read_only=True)
    courts_count = serializers.IntegerField(source="courts.count", read_only=True)

    class Meta(AdminUserSerializer.Meta):
        fields = AdminUserSerializer.Meta.fields + ("bookings_count", "courts_count")
        read_only_fields = fields


class UserQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES, required=False)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
    search = serializers.CharField(required=False, allow_blank=True)


class UserStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


class NotesSerializer(serializers.Serializer):
    admin_notes = serializers.CharField(allow_blank=True)


class OwnerDecisionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=(("approve", "Approve"), ("reject", "Reject")))
    admin_notes = serializers.CharField(required=False, allow_blank=True, default="")


# =========================================================
# COURTS / BOOKINGS / PAYMENTS
# =========================================================
class AdminCourtSerializer(serializers.ModelSerializer):
    owner_name = serializers.CharField(source="owner.full_name", read_only=True)
    owner_email = serializers.EmailField(source="owner.email", read_only=True)

    class Meta:
        model = Court
        fields = [
            "id",
            "name",
            "owner",
            "owner_name",
            "owner_email",
            "location",
            "district_name",
            "hourly_rate",
            "is_available",
            "status",
            "admin_notes",
            "created_at",
        ]
        read_only_fields = fields


class CourtStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=CourtStatus.CHOICES)
    admin_notes = serializers.CharField(required=False, allow_blank=True)


class BookingQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BookingStatus.CHOICES, required=False)
    court_id = serializers.IntegerField(required=False)
    user_id = serializers.IntegerField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)


class PaymentQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PaymentStatus.CHOICES, required=False)
    refund_requested = serializers.BooleanField(required=False, default=False)


class RefundSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


# =========================================================
# REPORTS / TASKS
# =========================================================
class ReportQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    group_by = serializers.ChoiceField(choices=(("day", "Day"), ("month", "Month")), default="day")
    export = serializers.ChoiceField(choices=(("json", "JSON"), ("csv", "CSV")), default="json")


class AdminActivityQuerySerializer(ReportQuerySerializer):
    admin_id = serializers.IntegerField(required=False, min_value=1)


class AdminLogSerializer(serializers.ModelSerializer):
    admin_email = serializers.EmailField(source="admin.email", read_only=True, default=None)

    class Meta:
        model = AdminLog
        fields = [
            "id",
            "admin",
            "admin_email",
            "action_type",
            "entity_type",
            "entity_id",
            "details",
            "created_at",
        ]


class RunTaskSerializer(serializers.Serializer):
    task = serializers.CharField()
