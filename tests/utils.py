"""
Shared builders for test data.
"""

from datetime import datetime

from django.utils import timezone

from apps.accounts.models import User
from apps.departments.models import Department
from apps.tasks.models import Task

_counter = {'value': 0}


def _next():
    _counter['value'] += 1
    return _counter['value']


def local_datetime(year, month, day, hour=0, minute=0):
    """Aware datetime in the project time zone."""
    return timezone.make_aware(datetime(year, month, day, hour, minute))


def make_department(name=None, code=None):
    n = _next()
    return Department.objects.create(name=name or f'Department {n}', code=code or f'D{n}')


def make_user(department=None, role=User.Role.EMPLOYEE, email=None, **extra):
    n = _next()
    return User.objects.create_user(
        email=email or f'user{n}@example.com',
        password='password',
        first_name='Test',
        last_name=f'User {n}',
        role=role,
        department=department,
        **extra,
    )


def make_task(department, created_by, assignee=None, status=Task.Status.PENDING,
              priority=Task.Priority.MEDIUM, created_at=None, due_date=None,
              completed_at=None):
    """Create a task; completed_at backdates updated_at for completion times."""
    task = Task.objects.create(
        title=f'Task {_next()}',
        department=department,
        created_by=created_by,
        assignee=assignee,
        status=status,
        priority=priority,
        created_at=created_at or timezone.now(),
        due_date=due_date,
    )
    if completed_at is not None:
        Task.objects.filter(pk=task.pk).update(updated_at=completed_at)
        task.refresh_from_db()
    return task
