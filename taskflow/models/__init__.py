"""
SQLAlchemy ORM models.

All models imported here to ensure they are registered with Base.metadata.
Import order matters: base models before dependent models.
"""

from taskflow.models.base import Base, TimestampMixin, UUIDMixin
from taskflow.models.identity import Identity, IdentityRole
from taskflow.models.project import Project
from taskflow.models.task import (
    RecurringCadence,
    ReviewStatus,
    Task,
    TaskPriority,
    TaskStatus,
    task_assignees,
)
from taskflow.models.activity_log import ActivityLog

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "Identity",
    "IdentityRole",
    "Project",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "RecurringCadence",
    "ReviewStatus",
    "task_assignees",
    "ActivityLog",
]
