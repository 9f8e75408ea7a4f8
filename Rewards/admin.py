from django.contrib import admin

from .models import Reward, RewardHistory, RewardRule


@admin.register(Reward)
class RewardAdmin(admin.ModelAdmin):
    list_display = ("name", "points_required", "is_active")
    list_filter = ("is_active",)


@admin.register(RewardRule)
class RewardRuleAdmin(admin.ModelAdmin):
    list_display = ("action_type", "points", "is_percentage", "min_amount", "max_points", "is_active")
    list_filter = ("is_active", "is_percentage")


@admin.register(RewardHistory)
class RewardHistoryAdmin(admin.ModelAdmin):
    list_display = ("user", "points", "type", "action_type", "expired", "created_at")
    list_filter = ("type", "expired")
    search_fields = ("user__email", "description")
    readonly_fields = ("created_at",)
