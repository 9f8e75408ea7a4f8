from django.contrib import admin

from .models import AdminLog


@admin.register(AdminLog)
class AdminLogAdmin(admin.ModelAdmin):
    list_display = ("id", "admin", "action_type", "entity_type", "entity_id", "created_at")
    list_filter = ("action_type", "entity_type")
    search_fields = ("admin__email", "action_type")
    list_select_related = ("admin",)
    date_hierarchy = "created_at"

    # The trail is append-only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
