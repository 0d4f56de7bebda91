"""
Service layer for analytics app.

All analytics logic is centralized here so views, scheduled jobs and
report generation share it.

Services:
- compute_*: Snapshot aggregation for one scope and date
- run_daily_aggregation: Upsert every department and user snapshot for a day
- get_*: Snapshot series for a scope and date range
- calculate_task_trends and dashboard summaries, including user activity
- detect_* / forecast_*: Anomaly, trend and forecast queries over snapshots
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import connections, transaction
from django.db.models import Count, Q
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .detection import (
    detect_anomalies, detect_trend,
    DEPARTMENT_ANOMALY_METRICS, USER_ANOMALY_METRICS,
)
from .forecasting import forecast
from .models import TaskMetrics, UserPerformance, DepartmentAnalytics
from apps.accounts.models import User
from apps.accounts.services import get_users_in_department
from apps.activity_log.services import get_department_activity, serialize_activity
from apps.departments.models import Department
from apps.tasks.models import Task
from apps.tasks.services import query_tasks, filter_tasks

logger = logging.getLogger(__name__)

PERIODS = ('daily', 'weekly', 'monthly')


# =============================================================================
# Input validation
# =============================================================================

def parse_scope_id(value, name='id'):
    """Validate a department or user identifier."""
    try:
        scope_id = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be a positive integer.')
    if scope_id <= 0:
        raise ValidationError(f'{name} must be a positive integer.')
    return scope_id


def _coerce_date(value, name):
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return timezone.localtime(value).date() if timezone.is_aware(value) else value.date()
    if isinstance(value, date):
        return value

    text = str(value)
    try:
        parsed = parse_date(text)
        if parsed is None:
            parsed_dt = parse_datetime(text)
            parsed = parsed_dt.date() if parsed_dt else None
    except ValueError:
        parsed = None

    if parsed is None:
        raise ValidationError(f'{name} must be a valid date (YYYY-MM-DD).')
    return parsed


def parse_date_range(start_date=None, end_date=None):
    """
    Normalise an inclusive date range.

    A missing end defaults to today, a missing start to
    ANALYTICS_DEFAULT_RANGE_DAYS before the end.

    Raises:
        ValidationError: If a date is malformed or end precedes start
    """
    end = _coerce_date(end_date, 'end_date') or timezone.localdate()
    start = _coerce_date(start_date, 'start_date')
    if start is None:
        start = end - timedelta(days=settings.ANALYTICS_DEFAULT_RANGE_DAYS)
    if end < start:
        raise ValidationError('End date must be after start date.')
    return start, end


# =============================================================================
# Snapshot aggregation
# =============================================================================

def _mean(values):
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def _hours(delta):
    return delta.total_seconds() / 3600


def _productivity(completed, overdue, total):
    """completion_rate*100 - overdue_rate*50, 0 without tasks. Unclamped."""
    if not total:
        return 0.0
    return (completed / total) * 100 - (overdue / total) * 50


def compute_department_snapshot(department_id, as_of_date, now=None):
    """
    Task counters for a department as of a date.

    Tasks created on or before as_of_date are counted. A task is overdue
    when it is not completed and its due date is before now.

    Returns:
        dict with total_tasks, completed_tasks, pending_tasks,
        overdue_tasks, average_completion_time (hours)
    """
    now = now or timezone.now()
    tasks = list(query_tasks(department_id=department_id, as_of_date=as_of_date))
    completed = [task for task in tasks if task.is_completed]

    return {
        'total_tasks': len(tasks),
        'completed_tasks': len(completed),
        'pending_tasks': sum(1 for task in tasks if task.status == Task.Status.PENDING),
        'overdue_tasks': sum(1 for task in tasks if task.is_overdue(now)),
        'average_completion_time': _mean(task.completion_hours for task in completed),
    }


def compute_user_snapshot(user_id, as_of_date, now=None):
    """
    Performance of a user over the tasks assigned to them.

    Response time is measured from task creation to its first comment,
    over tasks that have comments.

    Returns:
        dict with tasks_completed, tasks_overdue,
        average_response_time (hours), productivity_score
    """
    now = now or timezone.now()
    tasks = list(query_tasks(assignee_id=user_id, as_of_date=as_of_date, with_comments=True))

    completed = sum(1 for task in tasks if task.is_completed)
    overdue = sum(1 for task in tasks if task.is_overdue(now))

    response_times = []
    for task in tasks:
        comments = list(task.comments.all())
        if comments:
            response_times.append(_hours(comments[0].created_at - task.created_at))

    return {
        'tasks_completed': completed,
        'tasks_overdue': overdue,
        'average_response_time': _mean(response_times),
        'productivity_score': _productivity(completed, overdue, len(tasks)),
    }


def compute_department_analytics(department_id, as_of_date, now=None):
    """
    Staffing and efficiency for a department as of a date.

    Raises:
        Department.DoesNotExist: If the department is unknown

    Returns:
        dict with total_employees, active_employees,
        department_efficiency, average_task_completion_time (hours)
    """
    now = now or timezone.now()
    department = Department.objects.get(pk=department_id)
    users = list(get_users_in_department(department.pk))

    tasks = list(query_tasks(department_id=department.pk, as_of_date=as_of_date))
    completed = [task for task in tasks if task.is_completed]
    overdue = sum(1 for task in tasks if task.is_overdue(now))

    return {
        'total_employees': len(users),
        'active_employees': sum(1 for user in users if user.is_active),
        'department_efficiency': _productivity(len(completed), overdue, len(tasks)),
        'average_task_completion_time': _mean(task.completion_hours for task in completed),
    }


def _aggregate_department(department, as_of_date, now):
    """Upsert one department's snapshots and those of its users."""
    with transaction.atomic():
        TaskMetrics.objects.update_or_create(
            department=department,
            date=as_of_date,
            defaults=compute_department_snapshot(department.pk, as_of_date, now),
        )
        DepartmentAnalytics.objects.update_or_create(
            department=department,
            date=as_of_date,
            defaults=compute_department_analytics(department.pk, as_of_date, now),
        )

    users = list(get_users_in_department(department.pk))
    for user in users:
        with transaction.atomic():
            UserPerformance.objects.update_or_create(
                user=user,
                date=as_of_date,
                defaults=compute_user_snapshot(user.pk, as_of_date, now),
            )
    return len(users)


def _aggregate_department_in_worker(department, as_of_date, now):
    try:
        return _aggregate_department(department, as_of_date, now)
    finally:
        connections.close_all()


def run_daily_aggregation(as_of_date=None, now=None, max_workers=None):
    """
    Compute and upsert the day's snapshots for every department and user.

    Re-running for the same date replaces that date's rows. Departments are
    processed by a bounded thread pool when more than one worker is
    configured (ANALYTICS_AGGREGATION_WORKERS).

    Returns:
        dict with date, departments and users processed
    """
    now = now or timezone.now()
    as_of_date = as_of_date or timezone.localdate(now)
    workers = max_workers or settings.ANALYTICS_AGGREGATION_WORKERS

    departments = list(Department.objects.order_by('pk'))
    logger.info(f'Daily aggregation for {as_of_date}: {len(departments)} department(s)')

    if workers > 1 and len(departments) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            user_counts = list(executor.map(
                lambda department: _aggregate_department_in_worker(department, as_of_date, now),
                departments,
            ))
    else:
        user_counts = [
            _aggregate_department(department, as_of_date, now)
            for department in departments
        ]

    summary = {
        'date': as_of_date,
        'departments': len(departments),
        'users': sum(user_counts),
    }
    logger.info(
        f'Daily aggregation for {as_of_date} complete: '
        f'{summary["departments"]} department(s), {summary["users"]} user(s)'
    )
    return summary


# =============================================================================
# Snapshot series
# =============================================================================

def get_department_metrics(department_id, start_date=None, end_date=None):
    """TaskMetrics of a department in an inclusive date range, oldest first."""
    department_id = parse_scope_id(department_id, 'department_id')
    start, end = parse_date_range(start_date, end_date)
    Department.objects.get(pk=department_id)
    return TaskMetrics.objects.filter(
        department_id=department_id,
        date__range=(start, end),
    ).order_by('date')


def get_user_performance_metrics(user_id, start_date=None, end_date=None):
    """UserPerformance of a user in an inclusive date range, oldest first."""
    user_id = parse_scope_id(user_id, 'user_id')
    start, end = parse_date_range(start_date, end_date)
    User.objects.get(pk=user_id)
    return UserPerformance.objects.filter(
        user_id=user_id,
        date__range=(start, end),
    ).order_by('date')


def get_department_analytics(department_id, start_date=None, end_date=None):
    """DepartmentAnalytics of a department in an inclusive date range, oldest first."""
    department_id = parse_scope_id(department_id, 'department_id')
    start, end = parse_date_range(start_date, end_date)
    Department.objects.get(pk=department_id)
    return DepartmentAnalytics.objects.filter(
        department_id=department_id,
        date__range=(start, end),
    ).order_by('date')


def serialize_snapshot(snapshot):
    """Return a JSON-friendly dict of a snapshot's fields."""
    data = {
        field.attname: getattr(snapshot, field.attname)
        for field in snapshot._meta.concrete_fields
        if field.name not in ('created_at', 'updated_at')
    }
    if isinstance(snapshot, TaskMetrics):
        data['completion_rate'] = snapshot.completion_rate
    return data


# =============================================================================
# Trends and dashboards
# =============================================================================

def calculate_task_trends(department_id, period, start_date=None, end_date=None):
    """
    Completion, resolution time and distributions of a department's tasks
    created in a date range.

    Raises:
        ValidationError: If period is not daily, weekly or monthly
    """
    if period not in PERIODS:
        raise ValidationError(f'Invalid period: {period}. Use one of {", ".join(PERIODS)}.')
    department_id = parse_scope_id(department_id, 'department_id')
    start, end = parse_date_range(start_date, end_date)

    tasks = list(query_tasks(department_id=department_id, created_between=(start, end)))
    completed = [task for task in tasks if task.is_completed]

    priority_distribution = {value: 0 for value in Task.Priority.values}
    status_distribution = {value: 0 for value in Task.Status.values}
    for task in tasks:
        priority_distribution[task.priority] += 1
        status_distribution[task.status] += 1

    return {
        'department_id': department_id,
        'period': period,
        'start_date': start,
        'end_date': end,
        'completion_rate': len(completed) / len(tasks) * 100 if tasks else 0.0,
        'average_resolution_time': _mean(task.completion_hours for task in completed),
        'priority_distribution': priority_distribution,
        'status_distribution': status_distribution,
    }


def get_task_distribution(department_id=None, start_date=None, end_date=None, filters=None):
    """
    Task counts by status and by priority for tasks created in a range.

    Args:
        filters: Optional status, priority, assignee and created_by
    """
    start, end = parse_date_range(start_date, end_date)
    parameters = dict(filters or {})
    parameters.update({'start_date': start, 'end_date': end})
    if department_id is not None:
        parameters['department'] = parse_scope_id(department_id, 'department_id')

    tasks = filter_tasks(parameters).order_by()
    by_status = {
        row['status']: row['count']
        for row in tasks.values('status').annotate(count=Count('id'))
    }
    by_priority = {
        row['priority']: row['count']
        for row in tasks.values('priority').annotate(count=Count('id'))
    }
    return {'by_status': by_status, 'by_priority': by_priority}


def _period_label(day, period):
    if period == 'weekly':
        return f'Week {day.isocalendar()[1]}'
    if period == 'monthly':
        return day.strftime('%Y-%m')
    return day.isoformat()


def get_performance_trends(department_id=None, start_date=None, end_date=None, period='daily'):
    """Completion rate and resolution time per TaskMetrics row, labelled by period."""
    if period not in PERIODS:
        raise ValidationError(f'Invalid period: {period}. Use one of {", ".join(PERIODS)}.')
    start, end = parse_date_range(start_date, end_date)

    metrics = TaskMetrics.objects.filter(date__range=(start, end))
    if department_id is not None:
        metrics = metrics.filter(department_id=parse_scope_id(department_id, 'department_id'))

    return [
        {
            'date': _period_label(metric.date, period),
            'department_id': metric.department_id,
            'completion_rate': metric.completion_rate,
            'average_resolution_time': metric.average_completion_time,
        }
        for metric in metrics.order_by('date', 'department_id')
    ]


def get_department_comparison(start_date=None, end_date=None):
    """Task totals and completion times per department for tasks created in a range."""
    start, end = parse_date_range(start_date, end_date)

    comparison = []
    for department in Department.objects.order_by('name'):
        tasks = list(query_tasks(department_id=department.pk, created_between=(start, end)))
        completed = [task for task in tasks if task.is_completed]
        comparison.append({
            'department_id': department.pk,
            'department_name': department.name,
            'total_tasks': len(tasks),
            'completed_tasks': len(completed),
            'average_completion_time': _mean(task.completion_hours for task in completed),
        })
    return comparison


def get_priority_metrics(department_id=None, start_date=None, end_date=None):
    """Totals, completion and resolution hours per priority for tasks created in a range."""
    start, end = parse_date_range(start_date, end_date)
    tasks = Task.objects.filter(created_at__date__range=(start, end))
    if department_id is not None:
        tasks = tasks.filter(department_id=parse_scope_id(department_id, 'department_id'))

    counts = {
        row['priority']: row
        for row in tasks.order_by().values('priority').annotate(
            total=Count('id'),
            completed=Count('id', filter=Q(status=Task.Status.COMPLETED)),
        )
    }

    resolution_hours = {}
    for task in tasks:
        resolution_hours.setdefault(task.priority, []).append(
            _hours(task.updated_at - task.created_at)
        )

    metrics = []
    for priority in Task.Priority.values:
        if priority not in counts:
            continue
        total = counts[priority]['total']
        completed = counts[priority]['completed']
        metrics.append({
            'priority': priority,
            'total': total,
            'completed': completed,
            'average_resolution_time': _mean(resolution_hours.get(priority, [])),
            'completion_rate': completed / total * 100 if total else 0.0,
        })
    return metrics


def get_user_activity_metrics(department_id=None, start_date=None, end_date=None):
    """Activity entries in a date range, newest first, optionally for one department."""
    start, end = parse_date_range(start_date, end_date)
    if department_id is not None:
        department_id = parse_scope_id(department_id, 'department_id')
        Department.objects.get(pk=department_id)
    entries = get_department_activity(department_id, start, end)
    return [serialize_activity(entry) for entry in entries]


# =============================================================================
# Anomalies, trends and forecasts
# =============================================================================

def detect_task_anomalies(department_id, start_date=None, end_date=None):
    """Abrupt changes in a department's completed and overdue task counts."""
    metrics = get_department_metrics(department_id, start_date, end_date)
    return detect_anomalies(metrics, DEPARTMENT_ANOMALY_METRICS)


def detect_user_activity_anomalies(user_id, start_date=None, end_date=None):
    """Abrupt changes in a user's completed and overdue task counts."""
    performance = get_user_performance_metrics(user_id, start_date, end_date)
    return detect_anomalies(performance, USER_ANOMALY_METRICS)


def detect_department_trends(department_id, start_date=None, end_date=None):
    """Direction of a department's completed task count over the range."""
    metrics = get_department_metrics(department_id, start_date, end_date)
    return detect_trend(metrics, 'completed_tasks')


def forecast_task_completion(department_id, start_date=None, end_date=None):
    """Seven-day projection of a department's completed task count."""
    metrics = get_department_metrics(department_id, start_date, end_date)
    return forecast(metrics, 'completed_tasks')


def forecast_user_productivity(user_id, start_date=None, end_date=None):
    """Seven-day projection of a user's productivity score."""
    performance = get_user_performance_metrics(user_id, start_date, end_date)
    return forecast(performance, 'productivity_score')


def forecast_department_workload(department_id, start_date=None, end_date=None):
    """Seven-day projection of a department's total task count."""
    metrics = get_department_metrics(department_id, start_date, end_date)
    return forecast(metrics, 'total_tasks')
