"""
Admin configuration for analytics app.

Snapshots are written by the daily aggregation only.
"""

from django.contrib import admin
from .models import TaskMetrics, UserPerformance, DepartmentAnalytics


class ReadOnlySnapshotAdmin(admin.ModelAdmin):
    """Read-only admin for snapshot models."""

    date_hierarchy = 'date'
    ordering = ('-date',)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(TaskMetrics)
class TaskMetricsAdmin(ReadOnlySnapshotAdmin):
    list_display = (
        'department', 'date', 'total_tasks', 'completed_tasks',
        'pending_tasks', 'overdue_tasks', 'average_completion_time'
    )
    list_filter = ('department',)


@admin.register(UserPerformance)
class UserPerformanceAdmin(ReadOnlySnapshotAdmin):
    list_display = (
        'user', 'date', 'tasks_completed', 'tasks_overdue',
        'average_response_time', 'productivity_score'
    )
    list_filter = ('user__department',)
    search_fields = ('user__email',)


@admin.register(DepartmentAnalytics)
class DepartmentAnalyticsAdmin(ReadOnlySnapshotAdmin):
    list_display = (
        'department', 'date', 'total_employees', 'active_employees',
        'department_efficiency', 'average_task_completion_time'
    )
    list_filter = ('department',)
