"""
Admin configuration for accounts app.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import User
from apps.analytics.models import UserPerformance


class PerformanceSnapshotInline(admin.TabularInline):
    """Most recent performance snapshots of a user (read-only)."""

    model = UserPerformance
    fields = ('date', 'tasks_completed', 'tasks_overdue', 'average_response_time', 'productivity_score')
    readonly_fields = fields
    ordering = ('-date',)
    extra = 0
    max_num = 0
    can_delete = False
    show_change_link = False


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Email-based user admin with role and department."""

    list_display = ('email', 'get_full_name', 'role', 'department', 'is_active')
    list_filter = ('role', 'department', 'is_active')
    list_select_related = ('department',)
    search_fields = ('email', 'first_name', 'last_name')
    ordering = ('email',)

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        (_('Profile'), {'fields': ('first_name', 'last_name', 'role', 'department')}),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        (_('Dates'), {'fields': ('last_login', 'created_at', 'updated_at')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'last_name', 'role', 'department',
                       'password1', 'password2'),
        }),
    )
    readonly_fields = ('last_login', 'created_at', 'updated_at')
    inlines = [PerformanceSnapshotInline]
