"""
Account Models - storefront user with a back-office role.

Roles:
    - user: regular customer
    - company_owner: business customer managing their own employee accounts
    - company_employee: account created by a company owner
    - employee: handles orders, payments and refunds
    - admin: full back-office access
"""
from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class User(AbstractUser):
    """Customer or back-office account."""

    class Role(models.TextChoices):
        USER = 'user', 'User'
        COMPANY_OWNER = 'company_owner', 'Company owner'
        COMPANY_EMPLOYEE = 'company_employee', 'Company employee'
        EMPLOYEE = 'employee', 'Employee'
        ADMIN = 'admin', 'Admin'

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.USER,
        db_index=True,
        help_text="Back-office role"
    )
    phone_number = models.CharField(max_length=32, blank=True, default='')
    country_code = models.CharField(
        max_length=8,
        default='+48',
        help_text="Phone country calling code"
    )
    company_name = models.CharField(max_length=200, blank=True, default='')
    company_webpage = models.CharField(max_length=300, blank=True, default='')
    company_role = models.CharField(max_length=100, blank=True, default='')
    vat_number = models.CharField(max_length=32, blank=True, default='')
    address_line = models.CharField(max_length=300, blank=True, default='')
    owner = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='company_employees',
        help_text="Company owner of a company employee account"
    )
    user_agreement = models.BooleanField(default=False)

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-date_joined']

    def __str__(self):
        return f"{self.get_username()} ({self.role})"

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.get_username()

    @property
    def is_admin_role(self) -> bool:
        return self.is_superuser or self.role == self.Role.ADMIN

    @property
    def is_staff_role(self) -> bool:
        return self.is_admin_role or self.role == self.Role.EMPLOYEE

    @property
    def is_company_owner(self) -> bool:
        return self.role == self.Role.COMPANY_OWNER


class DiscountLevel(models.Model):
    """
    Customer discount tier.

    Levels are unique positive numbers; a user may belong to several tiers.
    """
    level = models.PositiveIntegerField(
        unique=True,
        validators=[MinValueValidator(1)]
    )
    discount_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    users = models.ManyToManyField(
        User,
        blank=True,
        related_name='discount_levels'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['level']

    def __str__(self):
        return f"Level {self.level} ({self.discount_percentage}%)"
