from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """
    Administrator-only access: users with the ADMIN role, or Django staff.
    """
    message = "Admin access required."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return getattr(user, "is_admin", False) or user.is_staff
