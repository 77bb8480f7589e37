"""
Users — DRF Permission Classes

Role checks used by every ViewSet. Roles are hierarchical only in the
sense that ADMIN is always accepted where MANAGER is.

@file users/permissions.py
"""

from rest_framework.permissions import SAFE_METHODS, BasePermission

from users.models import User


class IsActiveUser(BasePermission):
    """Authenticated and not deactivated."""

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and request.user.is_active
        )


class HasRole(BasePermission):
    """
    Requires one of ``view.required_roles``. Views without the attribute
    are open to any active user.

    Usage::

        class MyView(APIView):
            permission_classes = [IsActiveUser, HasRole]
            required_roles = ['ADMIN', 'MANAGER']
    """

    def has_permission(self, request, view):
        required = getattr(view, 'required_roles', [])
        if not required:
            return True
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.has_role(*required)


class IsManager(BasePermission):
    """ADMIN or MANAGER."""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_manager


class IsAdmin(BasePermission):
    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_admin


class IsManagerOrReadOnly(BasePermission):
    """Reads for any active user; writes for ADMIN / MANAGER."""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        return user.has_role(User.RoleChoices.ADMIN, User.RoleChoices.MANAGER)
