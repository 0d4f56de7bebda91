"""
JSON views for analytics app (Manager+ only).

Every view takes optional start_date / end_date query parameters
(YYYY-MM-DD). Validation problems return 400, unknown scopes 404.
"""

from functools import wraps

from django.contrib.auth.decorators import login_required, user_passes_test
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from . import services
from .exports import to_csv, to_excel
from apps.activity_log.services import get_activity_logs, serialize_activity


def is_manager_or_above(user):
    """Check if user is Manager or higher."""
    return user.is_authenticated and user.can_view_reports()


def is_admin(user):
    """Check if user is an admin."""
    return user.is_authenticated and user.is_admin()


def json_api(view_func):
    """Render a view's return value as JSON and map service errors to status codes."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            result = view_func(request, *args, **kwargs)
        except ValidationError as e:
            return JsonResponse({'errors': e.messages}, status=400)
        except ObjectDoesNotExist as e:
            return JsonResponse({'error': str(e) or 'Not found.'}, status=404)
        if isinstance(result, HttpResponse):
            return result
        return JsonResponse(result, safe=False)
    return wrapper


def _date_range(request):
    return request.GET.get('start_date'), request.GET.get('end_date')


def _snapshots(queryset):
    return [services.serialize_snapshot(snapshot) for snapshot in queryset]


XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def export_format(request):
    """The ?format= of an export request: csv (default) or xlsx."""
    value = request.GET.get('format', 'csv')
    if value not in ('csv', 'xlsx'):
        raise ValidationError('Format must be csv or xlsx.')
    return value


def export_response(rows, file_format, filename, sheet_name):
    """Attachment response with rows rendered as CSV or XLSX."""
    if file_format == 'csv':
        response = HttpResponse(to_csv(rows), content_type='text/csv')
    else:
        response = HttpResponse(to_excel(rows, sheet_name), content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}.{file_format}"'
    return response


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def department_metrics(request, department_id):
    return _snapshots(services.get_department_metrics(department_id, *_date_range(request)))


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def department_metrics_export(request, department_id):
    """Download department metrics as CSV or XLSX (?format=csv|xlsx)."""
    file_format = export_format(request)
    metrics = services.get_department_metrics(department_id, *_date_range(request))
    return export_response(metrics, file_format, 'department-metrics', 'Department Metrics')


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def user_performance(request, user_id):
    return _snapshots(services.get_user_performance_metrics(user_id, *_date_range(request)))


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def user_performance_export(request, user_id):
    """Download user performance snapshots as CSV or XLSX (?format=csv|xlsx)."""
    file_format = export_format(request)
    performance = services.get_user_performance_metrics(user_id, *_date_range(request))
    return export_response(performance, file_format, 'user-performance', 'User Performance')


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def department_analytics(request, department_id):
    return _snapshots(services.get_department_analytics(department_id, *_date_range(request)))


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def department_task_trends(request, department_id):
    period = request.GET.get('period', 'monthly')
    return services.calculate_task_trends(department_id, period, *_date_range(request))


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def user_activity(request, user_id):
    start, end = services.parse_date_range(*_date_range(request))
    user_id = services.parse_scope_id(user_id, 'user_id')
    entries = get_activity_logs(user_id, start, end, action=request.GET.get('action'))
    return [serialize_activity(entry) for entry in entries]


@login_required
@user_passes_test(is_admin)
@require_POST
@json_api
def update_metrics(request):
    """Run the daily aggregation on demand (Admin only)."""
    summary = services.run_daily_aggregation()
    return {'message': 'Daily metrics updated.', **summary}


# =============================================================================
# Dashboard
# =============================================================================

@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def task_distribution(request):
    filters = {
        key: request.GET[key]
        for key in ('status', 'priority', 'assignee', 'created_by')
        if request.GET.get(key)
    }
    return services.get_task_distribution(
        request.GET.get('department_id'), *_date_range(request), filters=filters
    )


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def performance_trends(request):
    return services.get_performance_trends(
        request.GET.get('department_id'),
        *_date_range(request),
        period=request.GET.get('period', 'daily'),
    )


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def department_comparison(request):
    return services.get_department_comparison(*_date_range(request))


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def priority_metrics(request):
    return services.get_priority_metrics(request.GET.get('department_id'), *_date_range(request))


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def user_activity_metrics(request):
    """Activity across users, optionally limited to ?department_id=."""
    return services.get_user_activity_metrics(
        request.GET.get('department_id'), *_date_range(request)
    )


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def department_anomalies(request, department_id):
    return services.detect_task_anomalies(department_id, *_date_range(request))


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def user_anomalies(request, user_id):
    return services.detect_user_activity_anomalies(user_id, *_date_range(request))


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def department_trend(request, department_id):
    return services.detect_department_trends(department_id, *_date_range(request))


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def forecast_task_completion(request, department_id):
    return services.forecast_task_completion(department_id, *_date_range(request))


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def forecast_user_productivity(request, user_id):
    return services.forecast_user_productivity(user_id, *_date_range(request))


@login_required
@user_passes_test(is_manager_or_above)
@require_GET
@json_api
def forecast_department_workload(request, department_id):
    return services.forecast_department_workload(department_id, *_date_range(request))
