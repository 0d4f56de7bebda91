"""
Admin configuration for activity_log app.

Entries are append-only: no add, change or delete from the admin.
"""

from django.contrib import admin
from .models import UserActivity


@admin.register(UserActivity)
class UserActivityAdmin(admin.ModelAdmin):

    list_display = ('timestamp', 'user', 'action', 'entity')
    list_filter = ('action',)
    list_select_related = ('user',)
    search_fields = ('user__email', 'entity_id')
    date_hierarchy = 'timestamp'

    @admin.display(description='Entity')
    def entity(self, obj):
        if not obj.entity_type:
            return '-'
        return f'{obj.entity_type} #{obj.entity_id}'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
