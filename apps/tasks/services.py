"""
Read-only task store for the analytics core.

Services:
- query_tasks: Fetch tasks for a department or assignee, optionally as of a date
- filter_tasks: Apply report parameters through TaskReportFilter
- serialize_task: Flatten a task into a JSON-friendly dict
"""

from django.core.exceptions import ValidationError
from django.db.models import Prefetch

from .filters import TaskReportFilter
from .models import Task, Comment


def query_tasks(department_id=None, assignee_id=None, as_of_date=None,
                created_between=None, with_comments=False):
    """
    Fetch tasks for a scope.

    Args:
        department_id: Restrict to a department
        assignee_id: Restrict to tasks assigned to a user
        as_of_date: Only tasks created on or before this date
        created_between: (start_date, end_date) inclusive on created date
        with_comments: Prefetch comments in chronological order

    Returns:
        QuerySet of Task
    """
    tasks = Task.objects.all()

    if department_id is not None:
        tasks = tasks.filter(department_id=department_id)
    if assignee_id is not None:
        tasks = tasks.filter(assignee_id=assignee_id)
    if as_of_date is not None:
        tasks = tasks.filter(created_at__date__lte=as_of_date)
    if created_between is not None:
        start_date, end_date = created_between
        tasks = tasks.filter(
            created_at__date__gte=start_date,
            created_at__date__lte=end_date,
        )
    if with_comments:
        tasks = tasks.prefetch_related(
            Prefetch('comments', queryset=Comment.objects.order_by('created_at'))
        )

    return tasks


def filter_tasks(parameters, queryset=None):
    """
    Filter tasks with report parameters.

    Raises:
        ValidationError: If any parameter is invalid (unknown department,
            bad date, unsupported status or priority)
    """
    filterset = TaskReportFilter.from_parameters(parameters, queryset=queryset)
    if not filterset.is_valid():
        raise ValidationError(
            [f'{field}: {" ".join(errors)}' for field, errors in filterset.errors.items()]
        )
    return filterset.qs


def serialize_task(task):
    """Return a JSON-friendly dict for a task."""
    return {
        'id': task.pk,
        'title': task.title,
        'department_id': task.department_id,
        'department': task.department.name if task.department_id else None,
        'assignee_id': task.assignee_id,
        'assignee': task.assignee.email if task.assignee_id else None,
        'created_by_id': task.created_by_id,
        'status': task.status,
        'priority': task.priority,
        'due_date': task.due_date,
        'created_at': task.created_at,
        'updated_at': task.updated_at,
    }
