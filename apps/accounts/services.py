"""
User directory services consumed by the analytics core.
"""

from .models import User


def get_users_in_department(department_id, active_only=False):
    """
    Return users belonging to a department, ordered by primary key.

    Args:
        department_id: Department primary key
        active_only: Only include users with is_active=True

    Returns:
        QuerySet of User
    """
    users = User.objects.filter(department_id=department_id)
    if active_only:
        users = users.filter(is_active=True)
    return users.order_by('pk')
