"""
Serializers for user accounts, company employees and discount levels.
"""
from rest_framework import serializers

from .models import DiscountLevel, User

PHONE_NUMBER_PATTERN = r'^[1-9]\d{8}$'
PHONE_NUMBER_ERROR = 'Phone number must be 9 digits starting with 1-9'


class UserSerializer(serializers.ModelSerializer):
    """Back-office view of a user account."""
    name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'name', 'first_name', 'last_name',
            'role', 'phone_number', 'country_code',
            'company_name', 'company_webpage', 'company_role',
            'vat_number', 'address_line', 'owner',
            'is_active', 'date_joined',
        ]
        read_only_fields = ['id', 'username', 'owner', 'date_joined']


class UserContactSerializer(serializers.ModelSerializer):
    """Minimal contact info shown next to an order."""
    name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'phone_number', 'country_code']


# =============================================================================
# Company employees
# =============================================================================

class CompanyEmployeeSerializer(serializers.ModelSerializer):
    """Employee account as listed to its company owner."""
    name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'name', 'email', 'phone_number', 'country_code',
            'company_name', 'vat_number', 'address_line', 'role', 'date_joined',
        ]
        read_only_fields = fields


class CompanyEmployeeCreateSerializer(serializers.Serializer):
    """
    Request format:
    {
        "name": "Anna Nowak",
        "email": "anna@example.com",
        "password": "secret123",
        "phone_number": "600100200"
    }
    """
    name = serializers.CharField(
        min_length=2, max_length=150,
        error_messages={'min_length': 'Name must be at least 2 characters'}
    )
    email = serializers.EmailField(error_messages={'invalid': 'Invalid email address'})
    password = serializers.CharField(
        min_length=8, write_only=True,
        error_messages={'min_length': 'Password must be at least 8 characters'}
    )
    phone_number = serializers.RegexField(
        PHONE_NUMBER_PATTERN,
        error_messages={'invalid': PHONE_NUMBER_ERROR}
    )


class CompanyEmployeeUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=150, required=False)
    email = serializers.EmailField(required=False)
    phone_number = serializers.RegexField(
        PHONE_NUMBER_PATTERN, required=False,
        error_messages={'invalid': PHONE_NUMBER_ERROR}
    )

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('At least one field is required')
        return attrs


# =============================================================================
# Discount levels
# =============================================================================

class DiscountLevelSerializer(serializers.ModelSerializer):
    """Discount tier with the number of assigned users."""
    level = serializers.IntegerField(
        min_value=1,
        error_messages={
            'min_value': 'Level must be a positive number',
            'invalid': 'Level must be a positive number',
        }
    )
    discount_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100,
        error_messages={
            'min_value': 'Discount percentage must be between 0 and 100',
            'max_value': 'Discount percentage must be between 0 and 100',
        }
    )
    user_ids = serializers.PrimaryKeyRelatedField(
        source='users', queryset=User.objects.all(), many=True,
        required=False, write_only=True
    )
    user_count = serializers.SerializerMethodField()

    class Meta:
        model = DiscountLevel
        fields = [
            'id', 'level', 'discount_percentage', 'user_ids', 'user_count',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_user_count(self, obj) -> int:
        count = getattr(obj, 'user_count', None)
        return obj.users.count() if count is None else count
