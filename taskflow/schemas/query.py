"""
Scope query schemas.

Scope names, sort orders and the secondary filters shared by every scope.
"""

from __future__ import annotations

import enum
from uuid import UUID

from pydantic import BaseModel, Field

from taskflow.models.task import ReviewStatus, TaskPriority, TaskStatus


class ScopeName(str, enum.Enum):
    """Named visibility rules a task listing can be computed for."""

    MINE = "mine"
    TEAM = "team"
    REVIEW = "review"
    REVIEW_REQUESTS = "review_requests"
    OTHER_DEPARTMENT = "other_department"


class SortOrder(str, enum.Enum):
    DEFAULT = "default"
    ALPHABETICAL = "alphabetical"


class TaskFilters(BaseModel):
    """
    Secondary filters, composed with the scope predicate by logical AND.

    ``status`` accepts a working status name, or the name prefixed with ``!``
    to select every other status (``"!COMPLETED"``).
    """

    status: str | None = Field(default=None, pattern=r"^!?(YTS|IN_PROGRESS|ON_HOLD|RECURRING|COMPLETED)$")
    assignee_id: UUID | None = None
    project_id: UUID | None = None
    department: str | None = Field(default=None, max_length=100)
    priority: TaskPriority | None = None
    review_status: ReviewStatus | None = None
    search: str | None = Field(default=None, max_length=200)

    model_config = {"frozen": True}

    def status_condition(self) -> tuple[TaskStatus, bool] | None:
        """Return (status, negated) for the status filter, if any."""
        if not self.status:
            return None
        negated = self.status.startswith("!")
        return TaskStatus(self.status.lstrip("!")), negated

    def cache_key(self) -> str:
        return self.model_dump_json(exclude_none=True)
