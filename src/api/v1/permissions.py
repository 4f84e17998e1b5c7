"""Custom DRF permissions for the merchant back-office."""
from rest_framework.permissions import BasePermission


class IsActiveAdmin(BasePermission):
    """Authenticated admin account whose status is ``active``.

    A locked account is rejected even if it still holds a session.
    """

    message = "An active admin account is required."

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and getattr(user, "is_active", False)
        )


class IsSuperAdmin(IsActiveAdmin):
    """Active admin with the ``super_admin`` role."""

    message = "Only super admins can perform this action."

    def has_permission(self, request, view):
        return super().has_permission(request, view) and getattr(request.user, "is_super_admin", False)
