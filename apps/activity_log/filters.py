"""
Activity log filters using django-filter.

Provides filtering for activity log queries used by user reports:
- User filter
- Department filter (department of the acting user)
- Action filter (choices from UserActivity.Action)
- Date Range filter (from date, to date)
"""

import django_filters

from .models import UserActivity
from apps.accounts.models import User
from apps.departments.models import Department


class ActivityLogFilter(django_filters.FilterSet):
    """
    Filter for activity log entries.

    - user: User who performed the action
    - department: Department of the user who performed the action
    - action: Filter by action type
    - date_from: Activities on or after this date
    - date_to: Activities on or before this date

    Usage:
        filterset = ActivityLogFilter(data, queryset=queryset)
        activities = filterset.qs
    """

    user = django_filters.ModelChoiceFilter(
        queryset=User.objects.all(),
        label='User',
    )

    department = django_filters.ModelChoiceFilter(
        field_name='user__department',
        queryset=Department.objects.all(),
        label='Department',
    )

    action = django_filters.ChoiceFilter(
        choices=UserActivity.Action.choices,
        label='Action',
    )

    date_from = django_filters.DateFilter(
        field_name='timestamp',
        lookup_expr='date__gte',
        label='From Date',
    )

    date_to = django_filters.DateFilter(
        field_name='timestamp',
        lookup_expr='date__lte',
        label='To Date',
    )

    class Meta:
        model = UserActivity
        fields = ['user', 'department', 'action', 'date_from', 'date_to']
