from django.contrib import admin

from .models import Promotion, PromotionUsage


@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "promotion_type",
        "discount_percent",
        "start_date",
        "end_date",
        "is_active",
        "usage_count",
        "usage_limit",
    )
    list_filter = ("promotion_type", "is_active", "user_specific")
    search_fields = ("code", "description")
    readonly_fields = ("usage_count", "view_count", "created_at", "updated_at")


@admin.register(PromotionUsage)
class PromotionUsageAdmin(admin.ModelAdmin):
    list_display = ("promotion", "user", "booking", "discount_amount", "used_at")
    search_fields = ("promotion__code", "user__email")
