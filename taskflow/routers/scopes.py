"""
Scope listing endpoints.

One pair of endpoints serves every task view (mine, team, review, review
requests, other departments); the scope name is a path parameter.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from taskflow.core.config import settings
from taskflow.core.dependencies import get_current_identity, get_query_service
from taskflow.models.identity import Identity
from taskflow.models.task import ReviewStatus, TaskPriority
from taskflow.schemas.query import ScopeName, SortOrder, TaskFilters
from taskflow.schemas.task import TaskListResponse, TaskStatsResponse
from taskflow.services.query_service import TaskQueryService

router = APIRouter()


def get_task_filters(
    status: str | None = Query(
        default=None,
        pattern=r"^!?(YTS|IN_PROGRESS|ON_HOLD|RECURRING|COMPLETED)$",
        description="Working status, or !STATUS to exclude it",
    ),
    assignee_id: UUID | None = Query(default=None),
    project_id: UUID | None = Query(default=None),
    department: str | None = Query(default=None, max_length=100),
    priority: TaskPriority | None = Query(default=None),
    review_status: ReviewStatus | None = Query(default=None),
    search: str | None = Query(default=None, max_length=200),
) -> TaskFilters:
    return TaskFilters(
        status=status,
        assignee_id=assignee_id,
        project_id=project_id,
        department=department,
        priority=priority,
        review_status=review_status,
        search=search,
    )


@router.get(
    "/scopes/{scope}/tasks",
    response_model=TaskListResponse,
    summary="List tasks visible in a scope",
)
async def list_scope_tasks(
    scope: ScopeName,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    sort: SortOrder = Query(default=SortOrder.DEFAULT),
    filters: TaskFilters = Depends(get_task_filters),
    identity: Identity = Depends(get_current_identity),
    service: TaskQueryService = Depends(get_query_service),
) -> TaskListResponse:
    return await service.list_tasks(scope, identity.id, filters, skip=skip, limit=limit, sort=sort)


@router.get(
    "/scopes/{scope}/stats",
    response_model=TaskStatsResponse,
    summary="Dashboard counters for a scope",
)
async def scope_stats(
    scope: ScopeName,
    filters: TaskFilters = Depends(get_task_filters),
    identity: Identity = Depends(get_current_identity),
    service: TaskQueryService = Depends(get_query_service),
) -> TaskStatsResponse:
    return await service.stats(scope, identity.id, filters)
