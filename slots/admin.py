from django.contrib import admin

from .models import CourtTimeslot


class SlotKindFilter(admin.SimpleListFilter):
    title = "kind"
    parameter_name = "kind"

    def lookups(self, request, model_admin):
        return (("template", "Weekly template"), ("dated", "Dated override"))

    def queryset(self, request, queryset):
        if self.value() == "template":
            return queryset.filter(specific_date__isnull=True)
        if self.value() == "dated":
            return queryset.filter(specific_date__isnull=False)
        return queryset


@admin.register(CourtTimeslot)
class CourtTimeslotAdmin(admin.ModelAdmin):
    list_display = (
        "court",
        "day_of_week",
        "specific_date",
        "start_time",
        "end_time",
        "price",
        "is_available",
    )
    list_editable = ("price", "is_available")
    list_filter = (SlotKindFilter, "day_of_week", "is_available", "court")
    search_fields = ("court__name", "court__owner__email")
    ordering = ("court", "specific_date", "day_of_week", "start_time")
    list_select_related = ("court",)

    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        ("When", {
            "description": "Leave the date empty for a weekly template slot.",
            "fields": ("court", "day_of_week", "specific_date", ("start_time", "end_time")),
        }),
        ("Pricing", {"fields": ("price", "is_available")}),
        ("Meta", {"fields": ("created_at", "updated_at")}),
    )
