"""
Account API Views.

Implements:
- GET /me/ - Current user profile
- GET /admin/users/ - List users (admin)
- GET/PATCH/DELETE /admin/users/{id}/ - Manage a user (admin)
- GET/POST /admin/discount-levels/ - Discount tiers (admin)
- GET/PUT/PATCH/DELETE /admin/discount-levels/{id}/ - Manage a tier (admin)
- GET/POST /dashboard/employees/ - Company owner's employee accounts
- GET/PATCH/DELETE /dashboard/employees/{id}/ - Manage one employee
"""
import logging

from django.db.models import Count, Q
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import ConflictError, error_response, server_error_response
from core.permissions import IsAdminRole, IsCompanyOwner
from .models import DiscountLevel, User
from .serializers import (
    CompanyEmployeeCreateSerializer,
    CompanyEmployeeSerializer,
    CompanyEmployeeUpdateSerializer,
    DiscountLevelSerializer,
    UserSerializer,
)
from .services import (
    company_employees,
    create_company_employee,
    update_company_employee,
    DuplicateEmailError,
    EmployeeLimitError,
)

logger = logging.getLogger(__name__)


class CurrentUserView(generics.RetrieveAPIView):
    """GET: Profile of the authenticated user."""
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]

    def get_object(self):
        return self.request.user


class AdminUserListView(generics.ListAPIView):
    """
    GET: List users.

    Query Parameters:
        - q: Search in username, email and names
        - role: Filter by role (user, company_owner, company_employee, employee, admin)
    """
    serializer_class = UserSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        queryset = User.objects.all()

        keyword = self.request.query_params.get('q', '').strip()
        if keyword:
            queryset = queryset.filter(
                Q(username__icontains=keyword) |
                Q(email__icontains=keyword) |
                Q(first_name__icontains=keyword) |
                Q(last_name__icontains=keyword)
            )

        role = self.request.query_params.get('role', '').lower()
        if role in User.Role.values:
            queryset = queryset.filter(role=role)

        return queryset.order_by('-date_joined')


class AdminUserDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET: Retrieve a user
    PUT/PATCH: Update profile fields or role
    DELETE: Delete a user
    """
    queryset = User.objects.all()
    serializer_class = UserSerializer
    permission_classes = [IsAdminRole]

    def perform_update(self, serializer):
        previous_role = serializer.instance.role
        user = serializer.save()
        if user.role != previous_role:
            logger.info(
                f"User #{user.pk} role changed from {previous_role} to {user.role} "
                f"by user #{self.request.user.pk}"
            )

    def perform_destroy(self, instance):
        logger.info(f"User #{instance.pk} deleted by user #{self.request.user.pk}")
        instance.delete()


# =============================================================================
# Discount levels
# =============================================================================

def ensure_level_available(level: int, exclude_pk=None):
    levels = DiscountLevel.objects.filter(level=level)
    if exclude_pk is not None:
        levels = levels.exclude(pk=exclude_pk)
    if levels.exists():
        raise ConflictError('A discount level with this number already exists')


class AdminDiscountLevelListCreateView(generics.ListCreateAPIView):
    """
    GET: List discount levels with user counts, lowest level first
    POST: Create a discount level

    Request Body (POST):
        {"level": 2, "discount_percentage": "7.50", "user_ids": [4, 9]}
    """
    serializer_class = DiscountLevelSerializer
    permission_classes = [IsAdminRole]
    pagination_class = None

    def get_queryset(self):
        return DiscountLevel.objects.annotate(user_count=Count('users')).order_by('level')

    def perform_create(self, serializer):
        ensure_level_available(serializer.validated_data['level'])
        discount_level = serializer.save()
        logger.info(
            f"Discount level {discount_level.level} ({discount_level.discount_percentage}%) "
            f"created by user #{self.request.user.pk}"
        )


class AdminDiscountLevelDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET: Retrieve a discount level
    PUT/PATCH: Update level number, percentage or assigned users
    DELETE: Delete a discount level; user assignments are removed with it
    """
    queryset = DiscountLevel.objects.all()
    serializer_class = DiscountLevelSerializer
    permission_classes = [IsAdminRole]

    def perform_update(self, serializer):
        level = serializer.validated_data.get('level')
        if level is not None:
            ensure_level_available(level, exclude_pk=serializer.instance.pk)
        discount_level = serializer.save()
        logger.info(f"Discount level #{discount_level.pk} updated by user #{self.request.user.pk}")

    def perform_destroy(self, instance):
        logger.info(
            f"Discount level {instance.level} deleted by user #{self.request.user.pk}, "
            f"{instance.users.count()} user(s) unassigned"
        )
        instance.delete()


# =============================================================================
# Company employees
# =============================================================================

class CompanyEmployeeListCreateView(generics.ListAPIView):
    """
    GET: Employee accounts of the authenticated company owner
    POST: Create an employee account (at most 5 per owner)
    """
    serializer_class = CompanyEmployeeSerializer
    permission_classes = [IsCompanyOwner]
    pagination_class = None

    def get_queryset(self):
        return company_employees(self.request.user).order_by('date_joined')

    def post(self, request):
        serializer = CompanyEmployeeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            employee = create_company_employee(request.user, serializer.validated_data)
        except EmployeeLimitError as e:
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))
        except DuplicateEmailError as e:
            return error_response(status.HTTP_409_CONFLICT, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error creating employee: {e}")
            return server_error_response(e)

        return Response(CompanyEmployeeSerializer(employee).data, status=status.HTTP_201_CREATED)


class CompanyEmployeeDetailView(generics.RetrieveDestroyAPIView):
    """
    GET: Retrieve one of the owner's employees
    PATCH: Update name, email or phone number
    DELETE: Delete the employee account
    """
    serializer_class = CompanyEmployeeSerializer
    permission_classes = [IsCompanyOwner]

    def get_queryset(self):
        return company_employees(self.request.user)

    def patch(self, request, pk):
        employee = self.get_object()
        serializer = CompanyEmployeeUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            employee = update_company_employee(employee, serializer.validated_data)
        except DuplicateEmailError as e:
            return error_response(status.HTTP_409_CONFLICT, str(e))

        return Response(CompanyEmployeeSerializer(employee).data)

    def perform_destroy(self, instance):
        logger.info(f"Employee #{instance.pk} deleted by company owner #{self.request.user.pk}")
        instance.delete()
