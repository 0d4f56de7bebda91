"""
Service layer for activity_log app.
"""

from django.core.exceptions import ValidationError

from .filters import ActivityLogFilter
from .models import UserActivity


def _filter_activity(data):
    filterset = ActivityLogFilter(
        data,
        queryset=UserActivity.objects.select_related('user'),
    )
    if not filterset.is_valid():
        raise ValidationError(
            [f'{field}: {" ".join(errors)}' for field, errors in filterset.errors.items()]
        )
    return filterset.qs.order_by('-timestamp')


def get_activity_logs(user_id, start_date, end_date, action=None):
    """
    Activity entries of a user within an inclusive date range, newest first.

    Raises:
        ValidationError: If the user or action is not recognised
    """
    data = {'user': user_id, 'date_from': start_date, 'date_to': end_date}
    if action:
        data['action'] = action
    return _filter_activity(data)


def get_department_activity(department_id, start_date, end_date):
    """
    Activity entries within an inclusive date range, newest first.

    Limited to users of one department when department_id is given.

    Raises:
        ValidationError: If the department is not recognised
    """
    data = {'date_from': start_date, 'date_to': end_date}
    if department_id:
        data['department'] = department_id
    return _filter_activity(data)


def serialize_activity(entry):
    """Return a JSON-friendly dict for an activity entry."""
    return {
        'id': entry.pk,
        'user_id': entry.user_id,
        'user': entry.user.email,
        'user_name': entry.user.get_full_name(),
        'action': entry.action,
        'entity_type': entry.entity_type,
        'entity_id': entry.entity_id,
        'details': entry.details,
        'timestamp': entry.timestamp,
    }
