"""
Task management endpoints.

CRUD operations for tasks, status shortcuts and the activity log.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from taskflow.core.dependencies import (
    get_activity_service,
    get_current_identity,
    get_task_service,
)
from taskflow.models.identity import Identity
from taskflow.schemas.activity import ActivityListResponse
from taskflow.schemas.task import (
    TaskCreateRequest,
    TaskResponse,
    TaskStatusUpdateRequest,
    TaskUpdateRequest,
)
from taskflow.services.activity_service import ActivityService
from taskflow.services.task_service import TaskService

router = APIRouter()


@router.post(
    "/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
async def create_task(
    body: TaskCreateRequest,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.create_task(identity.id, body)


@router.get(
    "/tasks/{task_id}",
    response_model=TaskResponse,
    summary="Get task detail",
)
async def get_task(
    task_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.get_task(task_id)


@router.patch(
    "/tasks/{task_id}",
    response_model=TaskResponse,
    summary="Update a task",
)
async def update_task(
    task_id: UUID,
    body: TaskUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.update_task(identity.id, task_id, body)


@router.patch(
    "/tasks/{task_id}/status",
    response_model=TaskResponse,
    summary="Change only the working status of a task",
)
async def quick_status_update(
    task_id: UUID,
    body: TaskStatusUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.quick_status_update(identity.id, task_id, body.status)


@router.post(
    "/tasks/{task_id}/complete",
    response_model=TaskResponse,
    summary="Mark a task as completed",
)
async def mark_complete(
    task_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.mark_complete(identity.id, task_id)


@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task",
)
async def delete_task(
    task_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
) -> Response:
    await service.delete_task(identity.id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/tasks/{task_id}/activity",
    response_model=ActivityListResponse,
    summary="List activity log entries for a task",
)
async def list_activity(
    task_id: UUID,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
    identity: Identity = Depends(get_current_identity),
    service: ActivityService = Depends(get_activity_service),
) -> ActivityListResponse:
    return await service.list_for_task(task_id, skip=skip, limit=limit)
