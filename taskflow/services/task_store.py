"""
Task persistence helpers shared by the task and review services.

Writes are flushed through the mapper's version counter: the UPDATE (or
DELETE) only matches the row version that was read, so when two requests
race on one task the second flush finds no row and fails.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from taskflow.core.exceptions import InvalidTransition, NotFound
from taskflow.models.base import utcnow
from taskflow.models.task import Task


class TaskStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, task_id: UUID) -> Task:
        result = await self.db.execute(select(Task).where(Task.id == task_id))
        task = result.scalar_one_or_none()
        if task is None:
            raise NotFound(f"Task {task_id} not found")
        return task

    def add(self, task: Task) -> None:
        self.db.add(task)

    async def delete(self, task: Task) -> None:
        await self.db.delete(task)
        await self.flush()

    async def save(self, task: Task) -> None:
        """Stamp and flush a modified task, bumping its version."""
        task.updated_at = utcnow()
        await self.flush()

    async def flush(self) -> None:
        try:
            await self.db.flush()
        except StaleDataError as exc:
            raise InvalidTransition(
                "Task was changed by a concurrent request; reload it and try again"
            ) from exc
