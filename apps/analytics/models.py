"""
Daily analytics snapshots.

Models:
- TaskMetrics: Department task counters for one date
- UserPerformance: Per-user completion and productivity for one date
- DepartmentAnalytics: Department staffing and efficiency for one date

Each snapshot is unique per (scope, date); the daily aggregation upserts.
Durations are stored in hours.
"""

from django.db import models
from django.conf import settings


class TaskMetrics(models.Model):
    """Department task metrics snapshot."""

    department = models.ForeignKey(
        'departments.Department',
        on_delete=models.CASCADE,
        related_name='task_metrics',
    )
    date = models.DateField(db_index=True)

    total_tasks = models.PositiveIntegerField(default=0)
    completed_tasks = models.PositiveIntegerField(default=0)
    pending_tasks = models.PositiveIntegerField(default=0)
    overdue_tasks = models.PositiveIntegerField(default=0)
    average_completion_time = models.FloatField(
        default=0,
        help_text='Mean hours from creation to completion'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'task metrics'
        verbose_name_plural = 'task metrics'
        ordering = ['date']
        constraints = [
            models.UniqueConstraint(
                fields=['department', 'date'],
                name='unique_task_metrics_per_day',
            ),
        ]

    def __str__(self):
        return f"{self.department} task metrics {self.date}"

    @property
    def completion_rate(self):
        """Percentage of tasks completed; 0 when there are no tasks."""
        if not self.total_tasks:
            return 0.0
        return self.completed_tasks / self.total_tasks * 100


class UserPerformance(models.Model):
    """User performance snapshot."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='performance_snapshots',
    )
    date = models.DateField(db_index=True)

    tasks_completed = models.PositiveIntegerField(default=0)
    tasks_overdue = models.PositiveIntegerField(default=0)
    average_response_time = models.FloatField(
        default=0,
        help_text='Mean hours from creation to first comment'
    )
    # Unclamped: high overdue rates produce negative scores
    productivity_score = models.FloatField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'user performance'
        verbose_name_plural = 'user performance'
        ordering = ['date']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'date'],
                name='unique_user_performance_per_day',
            ),
        ]

    def __str__(self):
        return f"{self.user} performance {self.date}"


class DepartmentAnalytics(models.Model):
    """Department analytics snapshot."""

    department = models.ForeignKey(
        'departments.Department',
        on_delete=models.CASCADE,
        related_name='analytics',
    )
    date = models.DateField(db_index=True)

    total_employees = models.PositiveIntegerField(default=0)
    active_employees = models.PositiveIntegerField(default=0)
    department_efficiency = models.FloatField(default=0)
    average_task_completion_time = models.FloatField(
        default=0,
        help_text='Mean hours from creation to completion'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'department analytics'
        verbose_name_plural = 'department analytics'
        ordering = ['date']
        constraints = [
            models.UniqueConstraint(
                fields=['department', 'date'],
                name='unique_department_analytics_per_day',
            ),
        ]

    def __str__(self):
        return f"{self.department} analytics {self.date}"
