"""
ActivityLog ORM model.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from taskflow.models.base import Base, UUIDMixin, utcnow


class ActivityLog(Base, UUIDMixin):
    """
    Append-only audit log of task events.

    task_id and actor_id are plain columns: entries outlive the task they
    describe (TaskDeleted is logged after the row is gone).
    """

    __tablename__ = "activity_log"

    kind: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    task_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    actor_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    payload: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False,
        default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<ActivityLog id={self.id} kind={self.kind!r} task_id={self.task_id}>"
