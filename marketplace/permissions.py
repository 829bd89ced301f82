from rest_framework import permissions

from utils.rbac import is_admin


class IsAdminRole(permissions.BasePermission):
    """
    Allows access only to admins (role "admin" or superuser).
    """

    message = "Admin access required"

    def has_permission(self, request, view):
        return is_admin(request.user)
