from rest_framework.permissions import BasePermission


class IsCourtOwner(BasePermission):
    message = "Access denied. Court owner role required"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_court_owner)


class IsApprovedCourtOwner(BasePermission):
    """
    Court owners can only manage courts and timeslots
    once an admin has approved their account.
    """
    message = "Your court owner account is not approved yet"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_approved_owner)


class IsPlatformAdmin(BasePermission):
    message = "Admin access required"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_platform_admin)
