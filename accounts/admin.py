"""
Django Admin configuration for user accounts and discount levels.
"""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import DiscountLevel, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['id', 'username', 'email', 'role', 'owner', 'is_active', 'date_joined']
    list_filter = ['role', 'is_active', 'is_staff']
    search_fields = ['username', 'email', 'first_name', 'last_name', 'company_name', 'vat_number']
    ordering = ['-date_joined']
    raw_id_fields = ['owner']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Storefront', {
            'fields': (
                'role', 'phone_number', 'country_code',
                'company_name', 'company_webpage', 'company_role',
                'vat_number', 'address_line', 'owner', 'user_agreement',
            ),
        }),
    )


@admin.register(DiscountLevel)
class DiscountLevelAdmin(admin.ModelAdmin):
    list_display = ['level', 'discount_percentage', 'user_count', 'updated_at']
    ordering = ['level']
    filter_horizontal = ['users']

    def user_count(self, obj):
        return obj.users.count()
    user_count.short_description = 'Users'
