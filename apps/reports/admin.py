"""
Admin configuration for reports app.
"""

from django.contrib import admin
from .models import ScheduledReport, CRON_KEY, LAST_SENT_KEY


@admin.register(ScheduledReport)
class ScheduledReportAdmin(admin.ModelAdmin):
    """Admin for ScheduledReport model."""

    list_display = ('name', 'report_type', 'owner', 'cron', 'last_sent', 'is_active')
    list_filter = ('report_type', 'is_active')
    search_fields = ('name', 'owner__email')
    raw_id_fields = ('owner',)
    readonly_fields = ('created_at', 'updated_at')

    @admin.display(description='Cron')
    def cron(self, obj):
        return self._schedule_value(obj, CRON_KEY)

    @admin.display(description='Last sent')
    def last_sent(self, obj):
        return self._schedule_value(obj, LAST_SENT_KEY)

    def _schedule_value(self, obj, key):
        try:
            return obj.schedule_data().get(key) or '-'
        except ValueError:
            return '(malformed)'

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('owner')
