"""
Task event consumer.

Appends every emitted workflow event to the activity log.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from taskflow.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(
    name="taskflow.workers.event_tasks.record_task_event",
    bind=True,
    max_retries=3,
    default_retry_delay=10,
)
def record_task_event(
    self,
    kind: str,
    task_id: str,
    actor_id: str,
    payload: dict[str, Any],
) -> dict[str, str]:
    try:
        # Fresh event loop per run: forked workers must not reuse the parent's loop.
        from taskflow.core.database import async_engine
        async_engine.sync_engine.dispose()

        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(_record(kind, task_id, actor_id, payload))
        finally:
            loop.close()
        return {"status": "recorded", "kind": kind, "task_id": task_id}
    except Exception as exc:
        logger.error("record_task_event failed for %s on %s: %s", kind, task_id, exc)
        raise self.retry(exc=exc)


async def _record(kind: str, task_id: str, actor_id: str, payload: dict[str, Any]) -> None:
    import uuid

    from taskflow.core.database import AsyncSessionLocal
    from taskflow.services.activity_service import ActivityService

    async with AsyncSessionLocal() as session:
        service = ActivityService(db=session)
        await service.record(
            kind=kind,
            task_id=uuid.UUID(task_id),
            actor_id=uuid.UUID(actor_id),
            payload=payload,
        )
        await session.commit()
