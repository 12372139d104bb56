from rest_framework.permissions import BasePermission, SAFE_METHODS

from .utils.constants import UserRole


def get_role(user):
    """Role of an authenticated user, None for anonymous users or users without a profile"""
    if not user or not user.is_authenticated:
        return None
    if user.is_superuser:
        return UserRole.ADMIN
    profile = getattr(user, 'profile', None)
    return profile.role if profile else None


def is_staff_user(user):
    return get_role(user) in UserRole.STAFF


class IsPassenger(BasePermission):
    def has_permission(self, request, view):
        return get_role(request.user) == UserRole.PASSENGER


class IsDriver(BasePermission):
    def has_permission(self, request, view):
        return get_role(request.user) == UserRole.DRIVER and hasattr(request.user, 'driver')


class IsAdminOrDispatcher(BasePermission):
    def has_permission(self, request, view):
        return is_staff_user(request.user)


class IsAdminRole(BasePermission):
    def has_permission(self, request, view):
        return get_role(request.user) == UserRole.ADMIN


class IsAdminOrReadOnly(BasePermission):
    """Anyone may read, only admins may write"""
    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return get_role(request.user) == UserRole.ADMIN
