"""
Task business logic.

Handles task create/update/delete and the status shortcuts used by the
dashboard (mark complete, quick status change). Authorization and
validation run before any field is touched, so a rejected call leaves the
task exactly as it was.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.exceptions import InvalidTransition, ValidationError
from taskflow.models.identity import Identity
from taskflow.models.project import Project
from taskflow.models.task import ReviewStatus, Task, TaskStatus
from taskflow.schemas.task import TaskCreateRequest, TaskResponse, TaskUpdateRequest
from taskflow.services.authorization import ensure_can_modify
from taskflow.services.cache import StatsCache
from taskflow.services.directory import IdentityDirectory, ProjectDirectory
from taskflow.services.events import EventEmitter, TaskEventKind, emit_safely
from taskflow.services.task_store import TaskStore

logger = logging.getLogger(__name__)

# Columns that may not be cleared through a partial update.
_NON_NULLABLE_FIELDS = ("title", "status", "priority")


def _check_dates(start_date: date | None, due_date: date | None) -> None:
    if start_date is not None and due_date is not None and due_date < start_date:
        raise ValidationError("Due date cannot be earlier than start date")


def _clean_title(title: str | None) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Title is required")
    return cleaned


class TaskService:
    """Handles all task operations outside the review workflow."""

    def __init__(
        self,
        db: AsyncSession,
        events: EventEmitter,
        cache: StatsCache | None = None,
    ) -> None:
        self.db = db
        self.events = events
        self.cache = cache
        self.store = TaskStore(db)
        self.identities = IdentityDirectory(db)
        self.projects = ProjectDirectory(db)

    # -----------------------------------------------------------------------
    # Create Task
    # -----------------------------------------------------------------------

    async def create_task(self, actor_id: UUID, data: TaskCreateRequest) -> TaskResponse:
        """
        Create a new task.

        The creator is always one of the assignees, alongside anyone listed
        in ``assignee_ids``.
        """
        actor = await self.identities.get_identity(actor_id)
        title = _clean_title(data.title)
        _check_dates(data.start_date, data.due_date)

        assignees = await self.identities.get_identities([actor.id, *data.assignee_ids])
        project = await self.projects.get_project(data.project_id) if data.project_id else None

        task = Task(
            title=title,
            description=data.description,
            status=data.status,
            priority=data.priority,
            start_date=data.start_date,
            due_date=data.due_date,
            project=project,
            recurring=data.recurring,
            brand=data.brand,
            tags=data.tags,
            created_by_id=actor.id,
            assignees=assignees,
        )
        self.store.add(task)
        await self.store.flush()

        logger.info("Task %s created by %s", task.id, actor.id)
        await self._publish(
            TaskEventKind.TASK_CREATED,
            task,
            actor,
            {
                "title": task.title,
                "status": task.status,
                "priority": task.priority,
                "project_id": task.project_id,
                "assignee_ids": task.assignee_ids,
            },
        )
        return TaskResponse.model_validate(task)

    # -----------------------------------------------------------------------
    # Get Task
    # -----------------------------------------------------------------------

    async def get_task(self, task_id: UUID) -> TaskResponse:
        task = await self.store.get(task_id)
        return TaskResponse.model_validate(task)

    # -----------------------------------------------------------------------
    # Update Task
    # -----------------------------------------------------------------------

    async def update_task(
        self,
        actor_id: UUID,
        task_id: UUID,
        data: TaskUpdateRequest,
    ) -> TaskResponse:
        """
        Apply a partial update.

        Editing a task whose review was rejected starts a fresh work cycle:
        the review block is cleared. While a review request awaits the
        reviewer the working status is frozen at ON_HOLD; other fields may
        still be edited.
        """
        actor = await self.identities.get_identity(actor_id)
        task = await self.store.get(task_id)
        ensure_can_modify(actor, task)

        changes = data.model_dump(exclude_unset=True)
        for field in _NON_NULLABLE_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be cleared")
        if (
            task.review_status == ReviewStatus.REVIEW_REQUESTED
            and changes.get("status", TaskStatus.ON_HOLD) != TaskStatus.ON_HOLD
        ):
            # Work stays paused until the reviewer answers the request.
            raise InvalidTransition(f"Task {task.id} is on hold pending review acceptance")
        if "title" in changes:
            changes["title"] = _clean_title(changes["title"])
        _check_dates(
            changes.get("start_date", task.start_date),
            changes.get("due_date", task.due_date),
        )

        assignees: list[Identity] | None = None
        if "assignee_ids" in changes:
            assignees = await self.identities.get_identities(changes.pop("assignee_ids") or [])

        project: Project | None = None
        if changes.get("project_id") is not None:
            project = await self.projects.get_project(changes["project_id"])

        # Validation done; mutate.
        for field, value in changes.items():
            if field == "project_id":
                task.project = project
            else:
                setattr(task, field, value)
        if assignees is not None:
            task.assignees = assignees
            changes["assignee_ids"] = [identity.id for identity in assignees]

        if task.review_status == ReviewStatus.REJECTED and changes:
            task.reset_review_block()
            changes["review_status"] = None

        await self.store.save(task)

        logger.info("Task %s updated by %s: %s", task.id, actor.id, sorted(changes))
        await self._publish(TaskEventKind.TASK_UPDATED, task, actor, {"changes": changes})
        return TaskResponse.model_validate(task)

    # -----------------------------------------------------------------------
    # Status shortcuts
    # -----------------------------------------------------------------------

    async def quick_status_update(
        self,
        actor_id: UUID,
        task_id: UUID,
        status: TaskStatus,
    ) -> TaskResponse:
        return await self.update_task(actor_id, task_id, TaskUpdateRequest(status=status))

    async def mark_complete(self, actor_id: UUID, task_id: UUID) -> TaskResponse:
        return await self.quick_status_update(actor_id, task_id, TaskStatus.COMPLETED)

    # -----------------------------------------------------------------------
    # Delete Task
    # -----------------------------------------------------------------------

    async def delete_task(self, actor_id: UUID, task_id: UUID) -> None:
        actor = await self.identities.get_identity(actor_id)
        task = await self.store.get(task_id)
        ensure_can_modify(actor, task)

        payload = {"title": task.title, "review_status": task.review_status}
        await self.store.delete(task)

        logger.info("Task %s deleted by %s", task_id, actor.id)
        await self._publish(TaskEventKind.TASK_DELETED, task, actor, payload)

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _publish(
        self,
        kind: TaskEventKind,
        task: Task,
        actor: Identity,
        payload: dict[str, Any],
    ) -> None:
        if self.cache is not None:
            await self.cache.invalidate()
        emit_safely(self.events, kind, task.id, actor.id, payload)
