"""
Service layer for reports app.

Report generation for stored ScheduledReport definitions:
- generate_custom_report: Load a report and build its data by type
- register_custom_report: Extension point for custom report providers
- report_export_rows: Flatten report data for CSV or XLSX export
- update_report_schedule: Validate and store a delivery schedule
"""

import logging

from croniter import croniter
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.utils.module_loading import import_string

from .models import ScheduledReport, CRON_KEY, RECIPIENT_KEY, LAST_SENT_KEY
from apps.activity_log.services import get_activity_logs, serialize_activity
from apps.analytics import services as analytics
from apps.tasks.models import Task
from apps.tasks.services import filter_tasks, serialize_task

logger = logging.getLogger(__name__)

CUSTOM_REPORT_PROVIDERS = {}
DEFAULT_CUSTOM_PROVIDER = 'summary'


# =============================================================================
# Custom report providers
# =============================================================================

def register_custom_report(name):
    """
    Register a callable(parameters) -> data as a custom report provider.

    Usage:
        @register_custom_report('open_urgent')
        def open_urgent(parameters):
            ...
    """
    def decorator(func):
        CUSTOM_REPORT_PROVIDERS[name] = func
        return func
    return decorator


def _load_configured_providers():
    for path in getattr(settings, 'ANALYTICS_CUSTOM_REPORT_PROVIDERS', []):
        provider = import_string(path)
        name = getattr(provider, 'report_name', provider.__name__)
        CUSTOM_REPORT_PROVIDERS.setdefault(name, provider)


def get_custom_report_provider(name):
    """
    Look up a custom report provider by name.

    Raises:
        ValidationError: If no provider is registered under that name
    """
    _load_configured_providers()
    try:
        return CUSTOM_REPORT_PROVIDERS[name]
    except KeyError:
        raise ValidationError(f'Unknown custom report provider: {name}.')


@register_custom_report('summary')
def summary_report(parameters):
    """Task counts by status and priority."""
    filters = {
        key: parameters[key]
        for key in ('status', 'priority', 'assignee_id', 'created_by_id')
        if parameters.get(key)
    }
    return analytics.get_task_distribution(
        parameters.get('department_id'),
        parameters.get('start_date'),
        parameters.get('end_date'),
        filters=filters,
    )


@register_custom_report('priority_metrics')
def priority_metrics_report(parameters):
    return analytics.get_priority_metrics(
        parameters.get('department_id'),
        parameters.get('start_date'),
        parameters.get('end_date'),
    )


@register_custom_report('department_comparison')
def department_comparison_report(parameters):
    return analytics.get_department_comparison(
        parameters.get('start_date'),
        parameters.get('end_date'),
    )


# =============================================================================
# Report generation
# =============================================================================

def generate_task_report(parameters):
    """Tasks filtered by department, date range, status and priority."""
    tasks = filter_tasks(
        parameters,
        queryset=Task.objects.select_related('department', 'assignee'),
    )
    return [serialize_task(task) for task in tasks.order_by('created_at', 'pk')]


def generate_user_report(parameters):
    """Performance snapshots and activity log of one user."""
    user_id = analytics.parse_scope_id(parameters.get('user_id'), 'user_id')
    start, end = analytics.parse_date_range(
        parameters.get('start_date'), parameters.get('end_date')
    )
    performance = analytics.get_user_performance_metrics(user_id, start, end)
    activity_log = get_activity_logs(user_id, start, end)
    return {
        'performance': [analytics.serialize_snapshot(snapshot) for snapshot in performance],
        'activity_log': [serialize_activity(entry) for entry in activity_log],
    }


def generate_department_report(parameters):
    """Metrics, analytics and monthly trends of one department."""
    department_id = analytics.parse_scope_id(parameters.get('department_id'), 'department_id')
    start, end = analytics.parse_date_range(
        parameters.get('start_date'), parameters.get('end_date')
    )
    metrics = analytics.get_department_metrics(department_id, start, end)
    department_analytics = analytics.get_department_analytics(department_id, start, end)
    return {
        'metrics': [analytics.serialize_snapshot(snapshot) for snapshot in metrics],
        'analytics': [analytics.serialize_snapshot(snapshot) for snapshot in department_analytics],
        'trends': analytics.calculate_task_trends(department_id, 'monthly', start, end),
    }


def generate_custom_report_data(parameters):
    """Delegate to the provider named by parameters['provider']."""
    provider = get_custom_report_provider(parameters.get('provider') or DEFAULT_CUSTOM_PROVIDER)
    return provider(parameters)


REPORT_GENERATORS = {
    ScheduledReport.ReportType.TASK.value: generate_task_report,
    ScheduledReport.ReportType.USER.value: generate_user_report,
    ScheduledReport.ReportType.DEPARTMENT.value: generate_department_report,
    ScheduledReport.ReportType.CUSTOM.value: generate_custom_report_data,
}


def generate_custom_report(report_id):
    """
    Build the data of a stored report.

    Args:
        report_id: ScheduledReport primary key

    Returns:
        dict with 'report' (ScheduledReport) and 'data'

    Raises:
        ScheduledReport.DoesNotExist: If the report does not exist
        ValidationError: If the report type or its parameters are invalid
    """
    report_id = analytics.parse_scope_id(report_id, 'report_id')
    report = ScheduledReport.objects.select_related('owner').get(pk=report_id)

    generator = REPORT_GENERATORS.get(report.report_type)
    if generator is None:
        raise ValidationError(f'Invalid report type: {report.report_type}.')

    parameters = report.parameters or {}
    if not isinstance(parameters, dict):
        raise ValidationError('Report parameters must be a JSON object.')

    data = generator(parameters)
    logger.debug(f'Generated {report.report_type} report {report.pk}')
    return {'report': report, 'data': data}


def serialize_report(report):
    """Return a JSON-friendly dict for a report definition."""
    return {
        'id': report.pk,
        'name': report.name,
        'description': report.description,
        'type': report.report_type,
        'parameters': report.parameters,
        'schedule': report.schedule,
        'is_active': report.is_active,
        'owner_id': report.owner_id,
    }


def report_export_rows(data):
    """
    Flatten generated report data into table rows for CSV or XLSX export.

    A list exports as is. A dict whose first value is a list exports that
    list (the performance of a user report, the metrics of a department
    report); any other non-empty dict exports as a single row.
    """
    if isinstance(data, dict):
        first = next(iter(data.values()), None)
        if not isinstance(first, list):
            return [data] if data else []
        data = first
    return [row if isinstance(row, dict) else {'value': row} for row in data or []]


def update_report_schedule(report, cron, recipient_email):
    """
    Replace a report's cron expression and recipient, keeping lastSent.

    Raises:
        ValidationError: If the cron expression or email is invalid
    """
    if not cron or not croniter.is_valid(cron):
        raise ValidationError(f'Invalid cron expression: {cron!r}.')
    validate_email(recipient_email)

    # A malformed non-object schedule is replaced outright
    schedule = dict(report.schedule) if isinstance(report.schedule, dict) else {}
    schedule.update({
        CRON_KEY: cron,
        RECIPIENT_KEY: recipient_email,
    })
    schedule.setdefault(LAST_SENT_KEY, None)
    report.schedule = schedule
    report.save(update_fields=['schedule', 'updated_at'])

    logger.info(f'Schedule of report {report.pk} set to "{cron}" for {recipient_email}')
    return report
