from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from Court.models import Court
from Dashboard.models import AdminLog
from Dashboard.services import OwnerApprovalService
from .models import User


# ----------------------------------
# OWNED COURTS INLINE
# ----------------------------------
class OwnedCourtInline(admin.TabularInline):
    model = Court
    fk_name = "owner"
    fields = ("name", "district_name", "hourly_rate", "status", "is_available")
    show_change_link = True
    extra = 0


class ApprovalStatusFilter(admin.SimpleListFilter):
    """Approval only means something for court owners."""

    title = "owner approval"
    parameter_name = "owner_approval"

    def lookups(self, request, model_admin):
        return User.APPROVAL_CHOICES

    def queryset(self, request, queryset):
        if self.value():
            return queryset.filter(role=User.COURT_OWNER, approval_status=self.value())
        return queryset


# ----------------------------------
# USER ADMIN
# ----------------------------------
@admin.register(User)
class UserAdmin(BaseUserAdmin):
    model = User

    list_display = (
        "email",
        "full_name",
        "role",
        "owner_approval",
        "reward_points",
        "is_active",
        "created_at",
    )
    list_filter = ("role", ApprovalStatusFilter, "is_active", "two_factor_enabled")
    search_fields = ("email", "full_name", "phone_number", "tax_code")
    ordering = ("-created_at",)
    actions = ("approve_owners", "reject_owners")

    fieldsets = (
        (None, {"fields": ("email", "password", "role")}),
        ("Profile", {
            "fields": ("full_name", "phone_number", "location", "birth_date", "profile_image_url")
        }),
        ("Court Owner Verification", {
            "fields": ("approval_status", "id_card", "tax_code", "admin_notes")
        }),
        ("Rewards & Security", {"fields": ("reward_points", "two_factor_enabled")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups")}),
        ("Activity", {"fields": ("last_login", "created_at")}),
    )

    # Points only move through the rewards ledger
    readonly_fields = ("created_at", "last_login", "reward_points", "two_factor_enabled")

    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("email", "full_name", "role", "password1", "password2"),
        }),
    )

    filter_horizontal = ("groups",)

    def get_inlines(self, request, obj):
        if obj is not None and obj.is_court_owner:
            return [OwnedCourtInline]
        return []

    @admin.display(description="Approval")
    def owner_approval(self, obj):
        return obj.approval_status if obj.is_court_owner else "-"

    def _decide(self, request, queryset, approve):
        owners = queryset.filter(role=User.COURT_OWNER)
        skipped = queryset.count() - owners.count()

        action_type = "approve_court_owner" if approve else "reject_court_owner"
        for owner in owners:
            OwnerApprovalService.decide(owner, approve=approve)
            AdminLog.record(request.user, action_type, owner, details={"source": "django_admin"})

        verb = "approved" if approve else "rejected"
        self.message_user(request, f"{owners.count()} court owner(s) {verb}")
        if skipped:
            self.message_user(request, f"{skipped} non-owner account(s) skipped", messages.WARNING)

    @admin.action(description="Approve selected court owners")
    def approve_owners(self, request, queryset):
        self._decide(request, queryset, approve=True)

    @admin.action(description="Reject selected court owners")
    def reject_owners(self, request, queryset):
        self._decide(request, queryset, approve=False)
