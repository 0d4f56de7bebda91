"""
User model for the ticket analytics project.

Users sign in with their email address. The role decides what analytics a
user may read; the department decides which department snapshots a user's
performance rolls up into.

AUTH_USER_MODEL = 'accounts.User'
"""

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    """Manager for email-identified users."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('The Email field must be set')

        user = self.model(email=self.normalize_email(email), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.Role.ADMIN)

        if not extra_fields['is_staff'] or not extra_fields['is_superuser']:
            raise ValueError('Superuser must have is_staff=True and is_superuser=True.')
        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Email-authenticated user with an analytics role.

    Roles:
    - Admin: Runs the aggregation on demand, manages report schedules
    - Senior Manager 1 / 2, Manager: Read analytics and generate reports
    - Employee: Subject of performance snapshots, no analytics access
    """

    class Role(models.TextChoices):
        ADMIN = 'admin', 'Admin'
        SENIOR_MANAGER_1 = 'senior_manager_1', 'Senior Manager 1'
        SENIOR_MANAGER_2 = 'senior_manager_2', 'Senior Manager 2'
        MANAGER = 'manager', 'Manager'
        EMPLOYEE = 'employee', 'Employee'

    REPORT_ROLES = (
        Role.ADMIN,
        Role.SENIOR_MANAGER_1,
        Role.SENIOR_MANAGER_2,
        Role.MANAGER,
    )

    username = None
    email = models.EmailField(
        'email address',
        unique=True,
        error_messages={
            'unique': 'A user with that email already exists.',
        },
    )

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.EMPLOYEE,
        db_index=True,
    )
    department = models.ForeignKey(
        'departments.Department',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='users',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name', 'last_name']

    class Meta:
        ordering = ['first_name', 'last_name']
        indexes = [
            models.Index(fields=['department', 'is_active']),
        ]

    def __str__(self):
        return self.email

    def get_full_name(self):
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.email

    def is_admin(self):
        return self.role == self.Role.ADMIN

    def can_view_reports(self):
        """Manager or above."""
        return self.role in self.REPORT_ROLES
