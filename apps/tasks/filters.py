"""
Task filters using django-filter.

TaskReportFilter backs task reports and task distribution queries:
- Department filter
- Created date range (start_date / end_date, inclusive)
- Status and priority
- Assignee and creator
"""

import django_filters

from .models import Task
from apps.departments.models import Department
from apps.accounts.models import User


class TaskReportFilter(django_filters.FilterSet):
    """
    Filter tasks by the parameters stored on a task report.

    Usage:
        filterset = TaskReportFilter(parameters, queryset=Task.objects.all())
        if filterset.is_valid():
            tasks = filterset.qs
    """

    department = django_filters.ModelChoiceFilter(
        queryset=Department.objects.all(),
        label='Department',
    )

    start_date = django_filters.DateFilter(
        field_name='created_at',
        lookup_expr='date__gte',
        label='Created From',
    )

    end_date = django_filters.DateFilter(
        field_name='created_at',
        lookup_expr='date__lte',
        label='Created To',
    )

    status = django_filters.ChoiceFilter(
        choices=Task.Status.choices,
        label='Status',
    )

    priority = django_filters.ChoiceFilter(
        choices=Task.Priority.choices,
        label='Priority',
    )

    assignee = django_filters.ModelChoiceFilter(
        queryset=User.objects.all(),
        label='Assignee',
    )

    created_by = django_filters.ModelChoiceFilter(
        queryset=User.objects.all(),
        label='Created By',
    )

    class Meta:
        model = Task
        fields = ['department', 'status', 'priority', 'assignee', 'created_by']

    @classmethod
    def from_parameters(cls, parameters, queryset=None):
        """
        Build a filterset from report parameters.

        Accepts both the form field names and the *_id aliases stored on
        reports (department_id, assignee_id, created_by_id).
        """
        data = {}
        for key, value in (parameters or {}).items():
            if value in (None, ''):
                continue
            if key.endswith('_id'):
                key = key[:-3]
            data[key] = value
        if queryset is None:
            queryset = Task.objects.all()
        return cls(data, queryset=queryset)
