"""
Activity log business logic.

The event consumer appends entries; the API reads them back per task.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.exceptions import ValidationError
from taskflow.models.activity_log import ActivityLog
from taskflow.schemas.activity import ActivityListResponse, ActivityResponse


class ActivityService:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def record(
        self,
        kind: str,
        task_id: UUID,
        actor_id: UUID,
        payload: dict[str, Any] | None = None,
    ) -> ActivityLog:
        entry = ActivityLog(kind=kind, task_id=task_id, actor_id=actor_id, payload=payload or {})
        self._db.add(entry)
        await self._db.flush()
        return entry

    async def list_for_task(
        self,
        task_id: UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> ActivityListResponse:
        """Newest entries first. Entries of deleted tasks stay readable."""
        if limit <= 0 or skip < 0:
            raise ValidationError("skip must be >= 0 and limit > 0")

        base_stmt = select(ActivityLog).where(ActivityLog.task_id == task_id)
        total = (
            await self._db.execute(select(func.count()).select_from(base_stmt.subquery()))
        ).scalar_one()

        result = await self._db.execute(
            base_stmt.order_by(ActivityLog.created_at.desc(), ActivityLog.id).offset(skip).limit(limit)
        )
        return ActivityListResponse(
            activities=[ActivityResponse.model_validate(entry) for entry in result.scalars().all()],
            total=total,
        )
