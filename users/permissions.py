"""DRF permission classes based on the lending role."""

from rest_framework import permissions


def is_inventory_admin(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "is_inventory_admin", False))


class IsInventoryAdmin(permissions.BasePermission):
    """Allow access only to users with the admin lending role (or superusers)."""

    def has_permission(self, request, view):
        return is_inventory_admin(request.user)


class IsInventoryAdminOrReadOnly(permissions.BasePermission):
    """Authenticated users may read; only admins may write."""

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_inventory_admin(request.user)
