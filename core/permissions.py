"""
Role-based permissions for the back-office endpoints.
"""
from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """Allows access to users with the admin role (or superusers)."""
    message = 'Admin access required'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin_role)


class IsStaffRole(BasePermission):
    """Allows access to admins and employees."""
    message = 'Admin or employee access required'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_staff_role)


class IsCompanyOwner(BasePermission):
    """Allows access to company owners managing their employee accounts."""
    message = 'Only company owners can manage employees'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_company_owner)
