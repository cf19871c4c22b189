"""
Paginated scope queries.

One service serves every task view: the scope name selects the visibility
rule, filters narrow it, and skip/limit page through it. A non-empty page and
its total come from a single statement (window count), so they describe the
same snapshot. A page past the end carries no rows, so its total comes from a
separate count query and may reflect writes committed in between.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import ColumnElement, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.exceptions import ValidationError
from taskflow.models.task import Task, TaskStatus
from taskflow.schemas.query import ScopeName, SortOrder, TaskFilters
from taskflow.schemas.task import TaskListResponse, TaskResponse, TaskStatsResponse
from taskflow.services.cache import StatsCache
from taskflow.services.directory import IdentityDirectory
from taskflow.services.scope_resolver import ScopeResolver


def _count_where(condition: ColumnElement[bool]) -> ColumnElement[int]:
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


class TaskQueryService:
    def __init__(
        self,
        db: AsyncSession,
        cache: StatsCache | None = None,
        resolver: ScopeResolver | None = None,
    ) -> None:
        self.db = db
        self.cache = cache
        self.resolver = resolver or ScopeResolver()
        self.identities = IdentityDirectory(db)

    # -----------------------------------------------------------------------
    # List
    # -----------------------------------------------------------------------

    async def list_tasks(
        self,
        scope: ScopeName,
        identity_id: UUID,
        filters: TaskFilters | None = None,
        skip: int = 0,
        limit: int = 25,
        sort: SortOrder = SortOrder.DEFAULT,
    ) -> TaskListResponse:
        """List the tasks visible to ``identity_id`` in ``scope``."""
        if limit <= 0:
            raise ValidationError("limit must be greater than 0")
        if skip < 0:
            raise ValidationError("skip must not be negative")

        identity = await self.identities.get_identity(identity_id)
        resolved = self.resolver.resolve(identity, scope, filters, sort)

        stmt = (
            select(Task, func.count().over().label("total"))
            .where(resolved.predicate)
            .order_by(*resolved.order_by)
            .offset(skip)
            .limit(limit)
        )
        rows = (await self.db.execute(stmt)).all()

        if rows:
            total = rows[0].total
        elif skip == 0:
            total = 0
        else:
            # Page past the end: no row carries the window count.
            count_stmt = select(func.count()).select_from(Task).where(resolved.predicate)
            total = (await self.db.execute(count_stmt)).scalar_one()

        return TaskListResponse(
            tasks=[TaskResponse.model_validate(row[0]) for row in rows],
            total=total,
            skip=skip,
            limit=limit,
        )

    # -----------------------------------------------------------------------
    # Stats
    # -----------------------------------------------------------------------

    async def stats(
        self,
        scope: ScopeName,
        identity_id: UUID,
        filters: TaskFilters | None = None,
    ) -> TaskStatsResponse:
        """Dashboard counters for a scope, served from cache when possible."""
        filters = filters or TaskFilters()
        identity = await self.identities.get_identity(identity_id)
        resolved = self.resolver.resolve(identity, scope, filters)

        if self.cache is not None:
            cached = await self.cache.get(identity.id, scope, filters)
            if cached is not None:
                return cached

        today = datetime.now(timezone.utc).date()
        stmt = select(
            func.count(),
            _count_where(Task.status == TaskStatus.COMPLETED),
            _count_where(Task.status == TaskStatus.IN_PROGRESS),
            _count_where(Task.status == TaskStatus.YTS),
            _count_where(Task.status == TaskStatus.ON_HOLD),
            _count_where(Task.recurring.is_not(None)),
            _count_where(
                (Task.due_date.is_not(None))
                & (Task.due_date < today)
                & (Task.status != TaskStatus.COMPLETED)
            ),
        ).select_from(Task).where(resolved.predicate)
        row = (await self.db.execute(stmt)).one()

        stats = TaskStatsResponse(
            total_tasks=row[0],
            completed=row[1],
            in_progress=row[2],
            yts=row[3],
            on_hold=row[4],
            recurring=row[5],
            overdue=row[6],
        )
        if self.cache is not None:
            await self.cache.set(identity.id, scope, filters, stats)
        return stats
