"""
Management command to set up Django-Q2 schedules for analytics jobs.

This command creates/updates the scheduled tasks required for:
- Daily analytics aggregation (ANALYTICS_AGGREGATION_CRON, 00:05 by default)
- Scheduled report dispatch (REPORT_TICK_CRON, hourly by default)

Usage:
    python manage.py setup_schedules

The command is idempotent - safe to run multiple times.
Existing schedules will be updated if their configuration changes.
"""
from django.conf import settings
from django.core.management.base import BaseCommand
from django_q.models import Schedule

SCHEDULES = [
    {
        'name': 'Daily Analytics Aggregation',
        'func': 'apps.notifications.tasks.run_daily_aggregation',
        'setting': 'ANALYTICS_AGGREGATION_CRON',
    },
    {
        'name': 'Scheduled Report Dispatch',
        'func': 'apps.notifications.tasks.dispatch_scheduled_reports',
        'setting': 'REPORT_TICK_CRON',
    },
]


class Command(BaseCommand):
    help = 'Set up Django-Q2 schedules for analytics jobs'

    def handle(self, *args, **options):
        self.stdout.write('\nSetting up Django-Q2 schedules...\n')

        schedules_created = 0
        schedules_updated = 0

        for entry in SCHEDULES:
            cron = getattr(settings, entry['setting'])
            schedule, created = Schedule.objects.update_or_create(
                name=entry['name'],
                defaults={
                    'func': entry['func'],
                    'schedule_type': Schedule.CRON,
                    'cron': cron,
                    'repeats': -1,  # Run forever
                }
            )
            if created:
                schedules_created += 1
                self.stdout.write(
                    self.style.SUCCESS(f'✓ Created schedule: {entry["name"]} ({cron})')
                )
            else:
                schedules_updated += 1
                self.stdout.write(
                    self.style.WARNING(f'↻ Updated schedule: {entry["name"]} ({cron})')
                )

        # Summary
        total = schedules_created + schedules_updated
        self.stdout.write('')

        if schedules_created > 0 and schedules_updated > 0:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Done! {schedules_created} schedule(s) created, '
                    f'{schedules_updated} schedule(s) updated. '
                    f'Total: {total} schedules configured.'
                )
            )
        elif schedules_created > 0:
            self.stdout.write(
                self.style.SUCCESS(f'Done! {schedules_created} schedules configured.')
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Done! All {total} schedules already exist and were updated.'
                )
            )

        self.stdout.write('')
        self.stdout.write(
            self.style.NOTICE(
                'Note: Ensure Django-Q cluster is running: python manage.py qcluster'
            )
        )
        self.stdout.write('')
