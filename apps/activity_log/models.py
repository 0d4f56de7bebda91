"""
Activity log model for user audit trails.

Logs user actions that feed user reports:
- Logins
- Task creation, updates and completion
- Comments added

Entries are append-only and never mutated.
"""

from django.db import models
from django.conf import settings
from django.utils import timezone


class UserActivity(models.Model):
    """
    Immutable audit log entry for a user action.

    Access: Admin only (read-only in the admin)
    """

    class Action(models.TextChoices):
        LOGIN = 'login', 'Login'
        TASK_CREATE = 'task_create', 'Task Created'
        TASK_UPDATE = 'task_update', 'Task Updated'
        TASK_COMPLETE = 'task_complete', 'Task Completed'
        COMMENT_ADD = 'comment_add', 'Comment Added'

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='activities',
        help_text='User who performed the action'
    )
    action = models.CharField(
        max_length=20,
        choices=Action.choices,
        db_index=True,
    )
    entity_type = models.CharField(max_length=50, blank=True)
    entity_id = models.CharField(max_length=50, blank=True)
    details = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        verbose_name = 'user activity'
        verbose_name_plural = 'user activities'
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['user', '-timestamp']),
            models.Index(fields=['action', '-timestamp']),
        ]

    def __str__(self):
        return f"{self.user} - {self.get_action_display()} at {self.timestamp:%Y-%m-%d %H:%M}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError('Activity log entries are immutable.')
        super().save(*args, **kwargs)


def log_user_activity(user, action, entity_type='', entity_id='', details=None,
                      timestamp=None):
    """
    Helper function to create activity log entries.

    Args:
        user: User who performed the action
        action: One of UserActivity.Action choices
        entity_type: Kind of entity acted on (e.g. 'task')
        entity_id: Identifier of the entity acted on
        details: Optional JSON-serialisable dict
        timestamp: Defaults to now

    Returns:
        Created UserActivity instance
    """
    return UserActivity.objects.create(
        user=user,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id else '',
        details=details or {},
        timestamp=timestamp or timezone.now(),
    )
