"""
Review workflow endpoints.

Thin wrappers over ReviewService; the acting identity is always the caller.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from taskflow.core.dependencies import get_current_identity, get_review_service
from taskflow.models.identity import Identity
from taskflow.schemas.task import (
    ReviewAcceptRequest,
    ReviewRequestCreate,
    ReviewRespondRequest,
    TaskResponse,
)
from taskflow.services.review_service import ReviewService

router = APIRouter()


@router.post(
    "/tasks/{task_id}/review",
    response_model=TaskResponse,
    summary="Request a review of a task",
)
async def request_review(
    task_id: UUID,
    body: ReviewRequestCreate,
    identity: Identity = Depends(get_current_identity),
    service: ReviewService = Depends(get_review_service),
) -> TaskResponse:
    return await service.request_review(task_id, identity.id, body.reviewer_id)


@router.post(
    "/tasks/{task_id}/review/accept",
    response_model=TaskResponse,
    summary="Accept or decline a review request (reviewer only)",
)
async def accept_review_request(
    task_id: UUID,
    body: ReviewAcceptRequest,
    identity: Identity = Depends(get_current_identity),
    service: ReviewService = Depends(get_review_service),
) -> TaskResponse:
    return await service.accept_review_request(task_id, identity.id, body.accept)


@router.post(
    "/tasks/{task_id}/review/respond",
    response_model=TaskResponse,
    summary="Approve or reject a task under review (reviewer only)",
)
async def respond_to_review(
    task_id: UUID,
    body: ReviewRespondRequest,
    identity: Identity = Depends(get_current_identity),
    service: ReviewService = Depends(get_review_service),
) -> TaskResponse:
    return await service.respond_to_review(task_id, identity.id, body.decision, body.comment)


@router.post(
    "/tasks/{task_id}/review/cancel",
    response_model=TaskResponse,
    summary="Withdraw a pending review request (requester only)",
)
async def cancel_review_request(
    task_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: ReviewService = Depends(get_review_service),
) -> TaskResponse:
    return await service.cancel_review_request(task_id, identity.id)
