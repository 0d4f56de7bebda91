"""
JSON views for reports app.

- report_detail: Generate a stored report (Manager+)
- report_export: Download a generated report as CSV or XLSX (Manager+)
- report_schedule: Replace a report's delivery schedule (Admin only)
"""

import json

from django.contrib.auth.decorators import login_required, user_passes_test
from django.core.exceptions import ValidationError
from django.http import HttpResponse
from django.views.decorators.http import require_GET, require_POST

from .models import ScheduledReport, CRON_KEY, RECIPIENT_KEY
from .services import (
    generate_custom_report, report_export_rows, serialize_report, update_report_schedule,
)
from apps.analytics.views import (
    export_format, export_response, is_admin, is_manager_or_above, json_api,
)


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def report_detail(request, report_id):
    result = generate_custom_report(report_id)
    return {
        'report': serialize_report(result['report']),
        'data': result['data'],
    }


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def report_export(request, report_id):
    """
    Download a generated report as CSV or XLSX (?format=csv|xlsx).

    Empty data gives a header-only CSV; an empty XLSX export is 204.
    """
    file_format = export_format(request)
    rows = report_export_rows(generate_custom_report(report_id)['data'])
    if not rows and file_format == 'xlsx':
        return HttpResponse(status=204)
    return export_response(rows, file_format, 'custom-report', 'Custom Report')


def _schedule_payload(request):
    if request.content_type == 'application/json':
        try:
            payload = json.loads(request.body or b'{}')
        except ValueError:
            raise ValidationError('Request body must be valid JSON.')
        if not isinstance(payload, dict):
            raise ValidationError('Request body must be a JSON object.')
        return payload
    return request.POST


@login_required
@user_passes_test(is_admin)
@require_POST
@json_api
def report_schedule(request, report_id):
    """Set cron and recipientEmail of a report; lastSent is kept."""
    report = ScheduledReport.objects.get(pk=report_id)
    payload = _schedule_payload(request)
    report = update_report_schedule(
        report,
        payload.get(CRON_KEY),
        payload.get(RECIPIENT_KEY),
    )
    return {'report': serialize_report(report)}
