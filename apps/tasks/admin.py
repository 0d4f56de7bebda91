"""
Admin configuration for tasks app.
"""

from django.contrib import admin
from .models import Task, Comment


class CommentInline(admin.TabularInline):
    """Inline admin for comments on task detail."""
    model = Comment
    extra = 0
    readonly_fields = ('author', 'content', 'created_at')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """Admin for Task model."""

    list_display = (
        'id', 'title', 'department', 'assignee', 'status', 'priority',
        'due_date', 'is_overdue_display', 'created_at'
    )
    list_filter = ('status', 'priority', 'department', 'created_at', 'due_date')
    search_fields = ('title', 'description')
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    readonly_fields = ('updated_at',)

    inlines = [CommentInline]

    def is_overdue_display(self, obj):
        return obj.is_overdue()
    is_overdue_display.short_description = 'Overdue'
    is_overdue_display.boolean = True

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related(
            'department', 'assignee', 'created_by'
        )
