"""Role helpers and permission classes shared by every API."""

from collections.abc import Iterable

from rest_framework.permissions import SAFE_METHODS
from rest_framework.permissions import BasePermission

ROLE_ADMIN = "Admin"
ROLE_PAYROLL = "Payroll"
ROLE_EMPLOYEE = "Employee"


def _user_in_groups(user, names: Iterable[str]) -> bool:
    groups = getattr(user, "groups", None)
    names_list = list(names)
    if not groups or not names_list:
        return False
    return groups.filter(name__in=names_list).exists()


def is_payroll_admin(user) -> bool:
    """Staff, ``role=admin`` or membership of the Admin/Payroll groups."""
    if not (user and getattr(user, "is_authenticated", False)):
        return False
    if getattr(user, "is_staff", False):
        return True
    if getattr(user, "role", None) == "admin":
        return True
    return _user_in_groups(user, [ROLE_ADMIN, ROLE_PAYROLL])


class _RolePermission(BasePermission):
    """Base helper to gate access by role names."""

    allowed_roles: tuple[str, ...] = ()
    allow_staff: bool = True

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not (user and getattr(user, "is_authenticated", False)):
            return False
        if self.allow_staff and getattr(user, "is_staff", False):
            return True
        if getattr(user, "role", None) == "admin":
            return True
        return _user_in_groups(user, self.allowed_roles)


class IsPayrollAdmin(_RolePermission):
    """Restrict access to Admin/Payroll roles (with staff overrides)."""

    allowed_roles = (ROLE_ADMIN, ROLE_PAYROLL)


class IsPayrollAdminOrReadOnly(IsPayrollAdmin):
    """Any authenticated user may read; only payroll admins may write."""

    def has_permission(self, request, view) -> bool:
        if request.method in SAFE_METHODS:
            return bool(getattr(request.user, "is_authenticated", False))
        return super().has_permission(request, view)
