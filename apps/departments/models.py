"""
Department model.

A department is the scope of the daily TaskMetrics and DepartmentAnalytics
snapshots. Departments are flat; there is no parent/child structure.
"""

from django.db import models


class Department(models.Model):
    """
    Organizational unit that owns tasks and employees.

    The short code (e.g. "ENG", "HR") is stored upper-case.
    """

    name = models.CharField(max_length=100, unique=True)
    code = models.CharField(
        max_length=10,
        unique=True,
        help_text='Short identifier (e.g., ENG, HR, FIN)'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        self.code = (self.code or '').upper()
        super().save(*args, **kwargs)

    @property
    def employee_count(self):
        """Active users in this department."""
        return self.users.filter(is_active=True).count()
