"""
Account Service Layer - company owners managing employee accounts.

An employee account is a regular login linked to its owner through
User.owner, created with the owner's company details copied over.
"""
import logging
from typing import Dict

from django.db import transaction
from django.db.models import Q

from .models import User

logger = logging.getLogger(__name__)

MAX_COMPANY_EMPLOYEES = 5
COPIED_COMPANY_FIELDS = ('company_name', 'company_webpage', 'vat_number', 'address_line', 'country_code')


class EmployeeLimitError(Exception):
    """Raised when an owner already has the maximum number of employees."""
    pass


class DuplicateEmailError(Exception):
    """Raised when an account with the given email already exists."""
    pass


def email_taken(email: str, exclude_pk=None) -> bool:
    users = User.objects.filter(Q(email__iexact=email) | Q(username__iexact=email))
    if exclude_pk is not None:
        users = users.exclude(pk=exclude_pk)
    return users.exists()


def company_employees(owner: User):
    return owner.company_employees.filter(role=User.Role.COMPANY_EMPLOYEE)


def create_company_employee(owner: User, data: Dict) -> User:
    """
    Create an employee account under a company owner.

    Args:
        owner: Company owner
        data: Validated 'name', 'email', 'password', 'phone_number'

    Returns:
        The created employee

    Raises:
        EmployeeLimitError: If the owner already has MAX_COMPANY_EMPLOYEES employees
        DuplicateEmailError: If the email is already in use
    """
    with transaction.atomic():
        # Lock the owner row so concurrent creates count consistently
        User.objects.select_for_update().filter(pk=owner.pk).first()

        if company_employees(owner).count() >= MAX_COMPANY_EMPLOYEES:
            logger.warning(f"Owner #{owner.pk} employee limit reached")
            raise EmployeeLimitError(f"Maximum of {MAX_COMPANY_EMPLOYEES} employees allowed")

        email = data['email']
        if email_taken(email):
            raise DuplicateEmailError('An account with this email already exists')

        employee = User(
            username=email,
            email=email,
            first_name=data['name'],
            phone_number=data['phone_number'],
            role=User.Role.COMPANY_EMPLOYEE,
            owner=owner,
            company_role='employee',
            user_agreement=True,
        )
        for field in COPIED_COMPANY_FIELDS:
            setattr(employee, field, getattr(owner, field))
        employee.set_password(data['password'])
        employee.save()

    logger.info(f"Employee #{employee.pk} created by company owner #{owner.pk}")
    return employee


def update_company_employee(employee: User, data: Dict) -> User:
    """
    Update an employee's name, email or phone number.

    Raises:
        DuplicateEmailError: If the new email belongs to another account
    """
    update_fields = []

    if data.get('email') and data['email'] != employee.email:
        if email_taken(data['email'], exclude_pk=employee.pk):
            raise DuplicateEmailError('An account with this email already exists')
        employee.email = employee.username = data['email']
        update_fields += ['email', 'username']

    if data.get('name'):
        employee.first_name = data['name']
        update_fields.append('first_name')

    if data.get('phone_number'):
        employee.phone_number = data['phone_number']
        update_fields.append('phone_number')

    if update_fields:
        employee.save(update_fields=update_fields)
        logger.info(f"Employee #{employee.pk} updated: {', '.join(update_fields)}")
    return employee
