from rest_framework import permissions

from access_expiration.decorators import is_administrator


class IsAdministrator(permissions.BasePermission):
    """Only active administrators can read and change users' access expiration data"""

    def has_permission(self, request, view):
        return bool(request and is_administrator(request.user))
