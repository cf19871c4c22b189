"""
Task ORM model.

A task carries its working status plus the review block. Every write goes
through the mapper's version counter, so concurrent writers to the same row
cannot both succeed.
"""

from __future__ import annotations

import enum
from datetime import date, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskflow.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from taskflow.models.identity import Identity
    from taskflow.models.project import Project


class TaskStatus(str, enum.Enum):
    """Working status of a task."""

    YTS = "YTS"
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"
    RECURRING = "RECURRING"
    COMPLETED = "COMPLETED"


class TaskPriority(str, enum.Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class RecurringCadence(str, enum.Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class ReviewStatus(str, enum.Enum):
    REVIEW_REQUESTED = "REVIEW_REQUESTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# States in which a reviewer is designated.
ACTIVE_REVIEW_STATES = frozenset({ReviewStatus.REVIEW_REQUESTED, ReviewStatus.UNDER_REVIEW})

# States from which a new review may be requested (None means no review yet).
REQUESTABLE_REVIEW_STATES = frozenset({None, ReviewStatus.APPROVED, ReviewStatus.REJECTED})


task_assignees = Table(
    "task_assignees",
    Base.metadata,
    Column("task_id", ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("identity_id", ForeignKey("identities.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Task(Base, UUIDMixin, TimestampMixin):
    """Represents a unit of work and its review state."""

    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint(
            "COALESCE(review_status IN ('REVIEW_REQUESTED', 'UNDER_REVIEW'), false) = (reviewer_id IS NOT NULL)",
            name="ck_tasks_active_review_has_reviewer",
        ),
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, name="task_status"),
        nullable=False,
        default=TaskStatus.IN_PROGRESS,
        index=True,
    )
    priority: Mapped[TaskPriority] = mapped_column(
        Enum(TaskPriority, name="task_priority"),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    project_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    recurring: Mapped[RecurringCadence | None] = mapped_column(
        Enum(RecurringCadence, name="recurring_cadence"),
        nullable=True,
    )
    brand: Mapped[str | None] = mapped_column(String(200), nullable=True)
    tags: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_by_id: Mapped[UUID] = mapped_column(
        ForeignKey("identities.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Review block
    review_status: Mapped[ReviewStatus | None] = mapped_column(
        Enum(ReviewStatus, name="review_status"),
        nullable=True,
        index=True,
    )
    review_requested_by_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("identities.id", ondelete="SET NULL"),
        nullable=True,
    )
    review_requested_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    reviewer_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("identities.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    reviewed_by_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("identities.id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    review_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    status_before_review: Mapped[TaskStatus | None] = mapped_column(
        Enum(TaskStatus, name="task_status"),
        nullable=True,
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    assignees: Mapped[list[Identity]] = relationship(
        "Identity",
        secondary=task_assignees,
        lazy="selectin",
        order_by="Identity.email",
    )
    project: Mapped[Project | None] = relationship("Project", lazy="selectin")

    @property
    def assignee_ids(self) -> list[UUID]:
        return [identity.id for identity in self.assignees]

    def reset_review_block(self) -> None:
        """Return the review block to the no-review state."""
        self.review_status = None
        self.reviewer_id = None
        self.review_requested_by_id = None
        self.review_requested_at = None
        self.reviewed_by_id = None
        self.reviewed_at = None
        self.review_comment = None
        self.status_before_review = None

    def __repr__(self) -> str:
        return f"<Task id={self.id} title={self.title!r} status={self.status} review={self.review_status}>"
