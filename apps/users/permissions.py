"""Permission classes shared by the resort APIs."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_resort_staff(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_resort_staff") and user.is_resort_staff()


class IsResortStaff(permissions.BasePermission):
    """
    Allows access only to managers and administrators.

    Staff verify payments, manage reservations, the catalog,
    blocked dates and promo codes.
    """

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_resort_staff(request.user)


class IsResortStaffOrReadOnly(permissions.BasePermission):
    """Anyone can read, only staff can write."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_resort_staff(request.user)
