"""
Task schemas.

Request/response models for task CRUD, review transitions and scope listings.
"""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from taskflow.models.task import (
    RecurringCadence,
    ReviewStatus,
    TaskPriority,
    TaskStatus,
)


# ---------------------------------------------------------------------------
# Task Create
# ---------------------------------------------------------------------------

class TaskCreateRequest(BaseModel):
    """Request body for POST /tasks."""

    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    status: TaskStatus = TaskStatus.IN_PROGRESS
    priority: TaskPriority = TaskPriority.MEDIUM
    start_date: date | None = None
    due_date: date | None = None
    project_id: UUID | None = None
    recurring: RecurringCadence | None = None
    brand: str | None = Field(default=None, max_length=200)
    tags: str | None = Field(default=None, max_length=500)
    assignee_ids: list[UUID] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Task Update
# ---------------------------------------------------------------------------

class TaskUpdateRequest(BaseModel):
    """Request body for PATCH /tasks/{task_id}. Only fields that are set are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    start_date: date | None = None
    due_date: date | None = None
    project_id: UUID | None = None
    recurring: RecurringCadence | None = None
    brand: str | None = Field(default=None, max_length=200)
    tags: str | None = Field(default=None, max_length=500)
    assignee_ids: list[UUID] | None = None


class TaskStatusUpdateRequest(BaseModel):
    """Request body for PATCH /tasks/{task_id}/status."""

    status: TaskStatus


# ---------------------------------------------------------------------------
# Review workflow
# ---------------------------------------------------------------------------

class ReviewRequestCreate(BaseModel):
    """Request body for POST /tasks/{task_id}/review."""

    reviewer_id: UUID


class ReviewAcceptRequest(BaseModel):
    """Request body for POST /tasks/{task_id}/review/accept."""

    accept: bool


class ReviewRespondRequest(BaseModel):
    """Request body for POST /tasks/{task_id}/review/respond."""

    decision: ReviewStatus = Field(description="APPROVED or REJECTED")
    comment: str | None = Field(default=None, max_length=5000)


# ---------------------------------------------------------------------------
# Nested response objects
# ---------------------------------------------------------------------------

class IdentitySummaryResponse(BaseModel):
    """Compact identity info embedded in task responses."""

    id: UUID
    display_name: str
    email: str
    department: str | None

    model_config = {"from_attributes": True}


class ProjectSummaryResponse(BaseModel):
    id: UUID
    name: str
    department: str | None

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Task detail
# ---------------------------------------------------------------------------

class TaskResponse(BaseModel):
    """Full task representation including the review block."""

    id: UUID
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    start_date: date | None
    due_date: date | None
    project_id: UUID | None
    project: ProjectSummaryResponse | None = None
    recurring: RecurringCadence | None
    brand: str | None
    tags: str | None
    created_by_id: UUID
    assignees: list[IdentitySummaryResponse] = Field(default_factory=list)
    review_status: ReviewStatus | None
    review_requested_by_id: UUID | None
    review_requested_at: datetime | None
    reviewer_id: UUID | None
    reviewed_by_id: UUID | None
    reviewed_at: datetime | None
    review_comment: str | None
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskListResponse(BaseModel):
    """Response for GET /scopes/{scope}/tasks."""

    tasks: list[TaskResponse]
    total: int
    skip: int
    limit: int


class TaskStatsResponse(BaseModel):
    """Per-scope dashboard counters."""

    total_tasks: int = 0
    completed: int = 0
    in_progress: int = 0
    yts: int = 0
    on_hold: int = 0
    recurring: int = 0
    overdue: int = 0
