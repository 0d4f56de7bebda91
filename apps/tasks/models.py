"""
Task store models.

Models:
- Task: Work item scoped to a department and an assignee
- Comment: Task comments; the first one marks the task's first response

Tasks are created and edited elsewhere; the analytics core only reads them.
"""

from django.db import models
from django.conf import settings
from django.utils import timezone


class Task(models.Model):
    """
    Main Task model.

    Status workflow: pending → in_progress → completed, any status → cancelled.
    A task is overdue when it is not completed and its due date has passed.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        IN_PROGRESS = 'in_progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    class Priority(models.TextChoices):
        LOW = 'low', 'Low'
        MEDIUM = 'medium', 'Medium'
        HIGH = 'high', 'High'
        URGENT = 'urgent', 'Urgent'

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    # Relationships
    department = models.ForeignKey(
        'departments.Department',
        on_delete=models.PROTECT,
        related_name='tasks',
    )
    assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='assigned_tasks',
        help_text='User assigned to complete this task'
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='created_tasks',
        help_text='User who created this task'
    )

    status = models.CharField(
        max_length=15,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    priority = models.CharField(
        max_length=10,
        choices=Priority.choices,
        default=Priority.MEDIUM,
        db_index=True,
    )

    due_date = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
    )

    # created_at is assignable so imported history keeps its original dates
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'task'
        verbose_name_plural = 'tasks'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['department', 'status']),
            models.Index(fields=['assignee', 'status']),
            models.Index(fields=['due_date', 'status']),
        ]

    def __str__(self):
        return f"#{self.pk}: {self.title}"

    @property
    def is_completed(self):
        return self.status == self.Status.COMPLETED

    def is_overdue(self, now=None):
        """Check if task is past its due date and not completed."""
        if not self.due_date or self.is_completed:
            return False
        return self.due_date < (now or timezone.now())

    @property
    def completion_hours(self):
        """Hours between creation and the last update of a completed task."""
        if not self.is_completed:
            return None
        return (self.updated_at - self.created_at).total_seconds() / 3600


class Comment(models.Model):
    """
    Task comment model.

    Comments are ordered chronologically.
    """

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='comments',
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='task_comments',
    )
    content = models.TextField()
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = 'comment'
        verbose_name_plural = 'comments'
        ordering = ['created_at']

    def __str__(self):
        return f"Comment by {self.author} on #{self.task_id}"
