"""
Scheduled report definitions.

The schedule is persisted as JSON:
    {"cron": "0 8 * * 1", "recipientEmail": "ops@example.com",
     "lastSent": "2024-06-03T08:05:00+05:30" | null}

Only the report scheduler writes lastSent, and only after a confirmed send.
"""

from datetime import timezone as dt_timezone

from croniter import croniter
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import models
from django.utils import timezone
from django.utils.dateparse import parse_datetime

CRON_KEY = 'cron'
RECIPIENT_KEY = 'recipientEmail'
LAST_SENT_KEY = 'lastSent'


class ScheduledReportQuerySet(models.QuerySet):

    def scheduled(self):
        """Active reports that carry a schedule."""
        return self.filter(is_active=True, schedule__isnull=False)


class ScheduledReport(models.Model):
    """
    A stored report definition, optionally delivered on a cron schedule.

    Report types:
    - task: Tasks filtered by department, date range, status, priority
    - user: Performance snapshots and activity log of one user
    - department: Metrics, analytics and monthly trends of one department
    - custom: Output of a registered custom report provider
    """

    class ReportType(models.TextChoices):
        TASK = 'task', 'Task'
        USER = 'user', 'User'
        DEPARTMENT = 'department', 'Department'
        CUSTOM = 'custom', 'Custom'

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    report_type = models.CharField(
        max_length=20,
        choices=ReportType.choices,
        db_index=True,
    )
    parameters = models.JSONField(
        default=dict,
        blank=True,
        help_text='Inputs consumed by the report generator'
    )
    schedule = models.JSONField(
        null=True,
        blank=True,
        help_text='{"cron": ..., "recipientEmail": ..., "lastSent": ...}'
    )
    is_active = models.BooleanField(default=True, db_index=True)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='scheduled_reports',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ScheduledReportQuerySet.as_manager()

    class Meta:
        verbose_name = 'scheduled report'
        verbose_name_plural = 'scheduled reports'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.get_report_type_display()})"

    def clean(self):
        """Validate parameters and schedule."""
        errors = {}
        if not isinstance(self.parameters, dict):
            errors['parameters'] = 'Parameters must be a JSON object.'

        if self.schedule is not None:
            if not isinstance(self.schedule, dict):
                errors['schedule'] = 'Schedule must be a JSON object.'
            else:
                cron = self.schedule.get(CRON_KEY)
                if not cron or not croniter.is_valid(cron):
                    errors['schedule'] = f'Invalid cron expression: {cron!r}.'
                recipient = self.schedule.get(RECIPIENT_KEY)
                if recipient:
                    try:
                        validate_email(recipient)
                    except ValidationError:
                        errors['schedule'] = f'Invalid recipient email: {recipient}.'

        if errors:
            raise ValidationError(errors)

    def schedule_data(self):
        """The stored schedule as a dict; a non-object schedule is malformed."""
        if self.schedule is None:
            return {}
        if not isinstance(self.schedule, dict):
            raise ValueError(f'Malformed schedule on report {self.pk}: {self.schedule!r}')
        return self.schedule

    @property
    def cron_expression(self):
        return self.schedule_data().get(CRON_KEY) or None

    @property
    def recipient_email(self):
        """Schedule recipient, falling back to the owner's email."""
        return self.schedule_data().get(RECIPIENT_KEY) or self.owner.email

    @property
    def last_sent_at(self):
        """Parsed lastSent timestamp, or None if never sent."""
        value = self.schedule_data().get(LAST_SENT_KEY)
        if not value:
            return None
        sent_at = parse_datetime(value)
        if sent_at is None:
            raise ValueError(f'Malformed lastSent on report {self.pk}: {value!r}')
        if timezone.is_naive(sent_at):
            sent_at = timezone.make_aware(sent_at, dt_timezone.utc)
        return sent_at

    def mark_sent(self, sent_at):
        """Record a successful delivery."""
        schedule = dict(self.schedule_data())
        schedule[LAST_SENT_KEY] = sent_at.isoformat()
        self.schedule = schedule
        self.save(update_fields=['schedule', 'updated_at'])
