"""
Admin configuration for departments app.
"""

from django.contrib import admin
from django.db.models import Count, Max

from .models import Department


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    """Department admin showing task volume and snapshot freshness."""

    list_display = ('code', 'name', 'employee_count', 'task_count', 'last_snapshot')
    search_fields = ('name', 'code')
    readonly_fields = ('created_at', 'updated_at')

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(
            _task_count=Count('tasks', distinct=True),
            _last_snapshot=Max('task_metrics__date'),
        )

    @admin.display(description='Tasks', ordering='_task_count')
    def task_count(self, obj):
        return obj._task_count

    @admin.display(description='Last snapshot', ordering='_last_snapshot')
    def last_snapshot(self, obj):
        return obj._last_snapshot or '-'
