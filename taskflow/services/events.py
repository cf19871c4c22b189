"""
Task event emission.

The workflow engine emits one event per committed mutation. Delivery is
fire-and-forget: an emitter failure is logged and never undoes the mutation
that produced the event.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Protocol
from uuid import UUID

from fastapi.encoders import jsonable_encoder

from taskflow.core.config import settings

logger = logging.getLogger(__name__)


class TaskEventKind(str, enum.Enum):
    TASK_CREATED = "TaskCreated"
    TASK_UPDATED = "TaskUpdated"
    TASK_DELETED = "TaskDeleted"
    REVIEW_REQUESTED = "ReviewRequested"
    REVIEW_ACCEPTED = "ReviewAccepted"
    REVIEW_CANCELLED = "ReviewCancelled"
    REVIEW_RESOLVED = "ReviewResolved"


class EventEmitter(Protocol):
    def emit(
        self,
        kind: TaskEventKind,
        task_id: UUID,
        actor_id: UUID,
        payload: dict[str, Any],
    ) -> None: ...


class CeleryEventEmitter:
    """Enqueue events for the activity-log consumer."""

    def emit(
        self,
        kind: TaskEventKind,
        task_id: UUID,
        actor_id: UUID,
        payload: dict[str, Any],
    ) -> None:
        # Deferred to avoid importing the Celery app at module load.
        from taskflow.workers.event_tasks import record_task_event

        record_task_event.delay(
            kind=kind.value,
            task_id=str(task_id),
            actor_id=str(actor_id),
            payload=jsonable_encoder(payload),
        )


class NullEventEmitter:
    def emit(
        self,
        kind: TaskEventKind,
        task_id: UUID,
        actor_id: UUID,
        payload: dict[str, Any],
    ) -> None:
        logger.debug("Event %s for task %s dropped (events disabled)", kind.value, task_id)


def emit_safely(
    emitter: EventEmitter,
    kind: TaskEventKind,
    task_id: UUID,
    actor_id: UUID,
    payload: dict[str, Any] | None = None,
) -> None:
    try:
        emitter.emit(kind, task_id, actor_id, payload or {})
    except Exception:
        logger.exception("Failed to emit %s for task %s", kind.value, task_id)


def get_event_emitter() -> EventEmitter:
    if settings.EVENTS_ENABLED:
        return CeleryEventEmitter()
    return NullEventEmitter()
