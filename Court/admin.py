# Court/admin.py

from django.contrib import admin

from slots.models import CourtTimeslot
from .models import (
    Booking,
    BookingJoinRequest,
    BookingPlayer,
    Court,
    Payment,
)


# -------------------------------
# TIMESLOT INLINE
# -------------------------------
# Weekly template and dated overrides shown inside Court admin
class CourtTimeslotInline(admin.TabularInline):
    model = CourtTimeslot
    extra = 0


# -------------------------------
# COURT ADMIN
# -------------------------------
@admin.register(Court)
class CourtAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "name",
        "owner",
        "district_name",
        "hourly_rate",   # Fallback per-hour price
        "is_available",
        "status",
    )
    list_filter = ("status", "is_available", "skill_level")
    search_fields = ("name", "location", "owner__email")
    inlines = [CourtTimeslotInline]


# -------------------------------
# BOOKING ADMIN
# -------------------------------
class BookingPlayerInline(admin.TabularInline):
    model = BookingPlayer
    extra = 0


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    readonly_fields = ("transaction_id", "amount", "status", "paid_at")
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "court",
        "user",
        "start_time",
        "end_time",
        "total_price",
        "status",
    )
    list_filter = ("status", "allow_join", "court")
    search_fields = ("court__name", "user__email")
    date_hierarchy = "start_time"
    inlines = [BookingPlayerInline, PaymentInline]


@admin.register(BookingJoinRequest)
class BookingJoinRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "user", "players_count", "status", "created_at")
    list_filter = ("status",)


# -------------------------------
# PAYMENT ADMIN
# -------------------------------
@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "transaction_id",
        "booking",
        "user",
        "amount",
        "payment_method",
        "payment_gateway",
        "status",
        "refund_status",
    )
    list_filter = ("status", "refund_status", "payment_method")
    search_fields = ("transaction_id", "user__email")
    readonly_fields = ("payment_data", "created_at", "updated_at")
