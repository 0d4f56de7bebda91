"""
Scheduled tasks run by the Django-Q2 cluster.

Background jobs for:
- Daily analytics aggregation (ANALYTICS_AGGREGATION_CRON)
- Scheduled report dispatch (REPORT_TICK_CRON)

Registered by `python manage.py setup_schedules`.
"""

from apps.analytics import services as analytics
from apps.reports.scheduler import get_scheduler


def run_daily_aggregation():
    """
    Scheduled job to run once a day.

    Upserts today's TaskMetrics, UserPerformance and DepartmentAnalytics
    snapshots for every department.
    """
    return analytics.run_daily_aggregation()


def dispatch_scheduled_reports():
    """
    Scheduled job to run every tick (hourly by default).

    Mails every scheduled report whose cron has fired since it was last sent.
    Returns None when the tick was skipped because another one is running.
    """
    results = get_scheduler().tick()
    if results is None:
        return None
    return {report_id: str(state) for report_id, state in results.items()}
