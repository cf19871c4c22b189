"""
Review workflow state machine.

    (none) --request--> REVIEW_REQUESTED --accept--> UNDER_REVIEW --respond--> APPROVED | REJECTED
                             |                                                      |
                             +--decline / withdraw--> (none)        <--request------+

Each transition is a single-row write guarded by the task's version
counter, so two requests racing on the same task cannot both apply.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.exceptions import Forbidden, InvalidTransition, NotReviewer, ValidationError
from taskflow.models.base import utcnow
from taskflow.models.task import (
    REQUESTABLE_REVIEW_STATES,
    ReviewStatus,
    Task,
    TaskStatus,
)
from taskflow.schemas.task import TaskResponse
from taskflow.services.authorization import ensure_can_modify
from taskflow.services.cache import StatsCache
from taskflow.services.directory import IdentityDirectory
from taskflow.services.events import EventEmitter, TaskEventKind, emit_safely
from taskflow.services.task_store import TaskStore

logger = logging.getLogger(__name__)

REVIEW_DECISIONS = frozenset({ReviewStatus.APPROVED, ReviewStatus.REJECTED})


def _ensure_reviewer(task: Task, actor_id: UUID) -> None:
    if task.reviewer_id is None:
        raise InvalidTransition(f"Task {task.id} has no active review")
    if task.reviewer_id != actor_id:
        raise NotReviewer(f"Identity {actor_id} is not the reviewer of task {task.id}")


def _ensure_state(task: Task, expected: ReviewStatus) -> None:
    if task.review_status != expected:
        current = task.review_status.value if task.review_status else "NONE"
        raise InvalidTransition(
            f"Task {task.id} is {current}, expected {expected.value}"
        )


def _withdraw(task: Task) -> TaskStatus:
    """Drop a pending request and put the task back to the status it had before."""
    restored = task.status_before_review or task.status
    task.reset_review_block()
    task.status = restored
    return restored


class ReviewService:
    """Applies review transitions on a single task."""

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

    # -----------------------------------------------------------------------
    # Request
    # -----------------------------------------------------------------------

    async def request_review(
        self,
        task_id: UUID,
        requester_id: UUID,
        reviewer_id: UUID,
    ) -> TaskResponse:
        """
        Ask ``reviewer_id`` to review the task.

        Work is paused while the request waits for acceptance: the working
        status moves to ON_HOLD and the previous status is kept so it can be
        restored if the request is declined or withdrawn.
        """
        requester = await self.identities.get_identity(requester_id)
        task = await self.store.get(task_id)
        ensure_can_modify(requester, task)

        if task.review_status not in REQUESTABLE_REVIEW_STATES:
            raise InvalidTransition(
                f"Task {task.id} already has a review in progress ({task.review_status.value})"
            )
        if reviewer_id == requester.id:
            raise ValidationError("A task cannot be reviewed by the identity requesting the review")
        reviewer = await self.identities.get_identity(reviewer_id)

        previous_status = task.status
        task.reset_review_block()
        task.review_status = ReviewStatus.REVIEW_REQUESTED
        task.reviewer_id = reviewer.id
        task.review_requested_by_id = requester.id
        task.review_requested_at = utcnow()
        task.status_before_review = previous_status
        task.status = TaskStatus.ON_HOLD
        await self.store.save(task)

        logger.info("Review of task %s requested by %s from %s", task.id, requester.id, reviewer.id)
        await self._publish(
            TaskEventKind.REVIEW_REQUESTED,
            task,
            requester.id,
            {"reviewer_id": reviewer.id, "previous_status": previous_status},
        )
        return TaskResponse.model_validate(task)

    # -----------------------------------------------------------------------
    # Accept / decline (reviewer side)
    # -----------------------------------------------------------------------

    async def accept_review_request(
        self,
        task_id: UUID,
        reviewer_id: UUID,
        accept: bool,
    ) -> TaskResponse:
        """
        Accept (UNDER_REVIEW) or decline (back to no review) a pending request.

        Only the designated reviewer may answer, and only before accepting.
        """
        reviewer = await self.identities.get_identity(reviewer_id)
        task = await self.store.get(task_id)
        _ensure_reviewer(task, reviewer.id)
        _ensure_state(task, ReviewStatus.REVIEW_REQUESTED)

        if accept:
            task.review_status = ReviewStatus.UNDER_REVIEW
            await self.store.save(task)
            logger.info("Review of task %s accepted by %s", task.id, reviewer.id)
            await self._publish(TaskEventKind.REVIEW_ACCEPTED, task, reviewer.id, {})
        else:
            requested_by = task.review_requested_by_id
            restored = _withdraw(task)
            await self.store.save(task)
            logger.info("Review of task %s declined by %s", task.id, reviewer.id)
            await self._publish(
                TaskEventKind.REVIEW_CANCELLED,
                task,
                reviewer.id,
                {"reason": "declined", "requested_by_id": requested_by, "restored_status": restored},
            )
        return TaskResponse.model_validate(task)

    # -----------------------------------------------------------------------
    # Respond (reviewer side)
    # -----------------------------------------------------------------------

    async def respond_to_review(
        self,
        task_id: UUID,
        reviewer_id: UUID,
        decision: ReviewStatus,
        comment: str | None = None,
    ) -> TaskResponse:
        """
        Resolve an accepted review as APPROVED or REJECTED.

        The working status is left alone; completing or resuming the task is
        a separate, explicit update.
        """
        if decision not in REVIEW_DECISIONS:
            raise ValidationError("Review decision must be APPROVED or REJECTED")

        reviewer = await self.identities.get_identity(reviewer_id)
        task = await self.store.get(task_id)
        _ensure_reviewer(task, reviewer.id)
        _ensure_state(task, ReviewStatus.UNDER_REVIEW)

        task.review_status = decision
        task.reviewed_by_id = reviewer.id
        task.reviewed_at = utcnow()
        task.review_comment = comment.strip() if comment and comment.strip() else None
        task.reviewer_id = None
        task.status_before_review = None
        await self.store.save(task)

        logger.info("Review of task %s resolved as %s by %s", task.id, decision.value, reviewer.id)
        await self._publish(
            TaskEventKind.REVIEW_RESOLVED,
            task,
            reviewer.id,
            {"decision": decision, "comment": task.review_comment},
        )
        return TaskResponse.model_validate(task)

    # -----------------------------------------------------------------------
    # Withdraw (requester side)
    # -----------------------------------------------------------------------

    async def cancel_review_request(self, task_id: UUID, requester_id: UUID) -> TaskResponse:
        """Withdraw a request that the reviewer has not accepted yet."""
        requester = await self.identities.get_identity(requester_id)
        task = await self.store.get(task_id)
        _ensure_state(task, ReviewStatus.REVIEW_REQUESTED)
        if task.review_requested_by_id != requester.id:
            raise Forbidden(f"Only the requester may withdraw the review of task {task.id}")

        reviewer_id = task.reviewer_id
        restored = _withdraw(task)
        await self.store.save(task)

        logger.info("Review of task %s withdrawn by %s", task.id, requester.id)
        await self._publish(
            TaskEventKind.REVIEW_CANCELLED,
            task,
            requester.id,
            {"reason": "withdrawn", "reviewer_id": reviewer_id, "restored_status": restored},
        )
        return TaskResponse.model_validate(task)

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _publish(
        self,
        kind: TaskEventKind,
        task: Task,
        actor_id: UUID,
        payload: dict[str, Any],
    ) -> None:
        if self.cache is not None:
            await self.cache.invalidate()
        emit_safely(self.events, kind, task.id, actor_id, payload)
