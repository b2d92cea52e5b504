"""
Permission Core - role gates and list visibility.
"""

from thesis_tracker.kernel.permissions.permission_service import (
    PermissionService,
    PendingFilter,
    is_query_true,
    is_student,
    is_administrator,
    require_role,
    require_administrator,
    require_staff,
    require_author_if_student,
)

__all__ = [
    "PermissionService",
    "PendingFilter",
    "is_query_true",
    "is_student",
    "is_administrator",
    "require_role",
    "require_administrator",
    "require_staff",
    "require_author_if_student",
]
