from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "title", "type", "is_system", "is_read", "created_at")
    list_filter = ("type", "is_system", "is_read")
    search_fields = ("title", "user__email")
    readonly_fields = ("created_at",)
