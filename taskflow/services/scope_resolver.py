"""
Scope resolution.

Turns (identity, scope name, filters, sort) into a SQL predicate and an
ORDER BY. Every task listing and counter in the system goes through here,
so a task is visible in a view if and only if the predicate built for that
view matches it.

Department matching for the team scope joins task assignees against the
identity table at query time; departments are never copied onto tasks.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import ColumnElement, and_, false, func, or_, true
from sqlalchemy.sql.elements import UnaryExpression

from taskflow.core.exceptions import Forbidden
from taskflow.models.identity import Identity
from taskflow.models.project import Project
from taskflow.models.task import ReviewStatus, Task
from taskflow.schemas.query import ScopeName, SortOrder, TaskFilters
from taskflow.services.directory import normalize_department


@dataclass(frozen=True)
class ResolvedScope:
    predicate: ColumnElement[bool]
    order_by: tuple[UnaryExpression, ...]


def _normalized(column) -> ColumnElement:
    return func.lower(func.trim(column))


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ScopeResolver:
    def resolve(
        self,
        identity: Identity,
        scope: ScopeName,
        filters: TaskFilters | None = None,
        sort: SortOrder = SortOrder.DEFAULT,
    ) -> ResolvedScope:
        filters = filters or TaskFilters()
        conditions = [self.scope_predicate(identity, scope, filters), *self.filter_predicates(filters)]
        return ResolvedScope(predicate=and_(*conditions), order_by=self.order_by(sort))

    # -----------------------------------------------------------------------
    # Scopes
    # -----------------------------------------------------------------------

    def scope_predicate(
        self,
        identity: Identity,
        scope: ScopeName,
        filters: TaskFilters,
    ) -> ColumnElement[bool]:
        if scope == ScopeName.MINE:
            return Task.assignees.any(Identity.id == identity.id)

        if scope == ScopeName.TEAM:
            if identity.is_super_admin and normalize_department(filters.department):
                # The explicit department filter governs instead.
                return true()
            department = normalize_department(identity.department)
            if department is None:
                return false()
            return Task.assignees.any(_normalized(Identity.department) == department)

        if scope == ScopeName.REVIEW:
            return and_(
                Task.review_status == ReviewStatus.UNDER_REVIEW,
                Task.reviewer_id == identity.id,
            )

        if scope == ScopeName.REVIEW_REQUESTS:
            return and_(
                Task.review_status == ReviewStatus.REVIEW_REQUESTED,
                Task.reviewer_id == identity.id,
            )

        if scope == ScopeName.OTHER_DEPARTMENT:
            if not identity.is_super_admin:
                raise Forbidden("Only super admins can list tasks across departments")
            conditions = [Project.department.is_not(None), func.trim(Project.department) != ""]
            own_department = normalize_department(identity.department)
            if own_department is not None and normalize_department(filters.department) is None:
                conditions.append(_normalized(Project.department) != own_department)
            return Task.project.has(and_(*conditions))

        raise ValueError(f"Unknown scope: {scope!r}")

    # -----------------------------------------------------------------------
    # Secondary filters
    # -----------------------------------------------------------------------

    def filter_predicates(self, filters: TaskFilters) -> list[ColumnElement[bool]]:
        conditions: list[ColumnElement[bool]] = []

        status_condition = filters.status_condition()
        if status_condition is not None:
            status, negated = status_condition
            conditions.append(Task.status != status if negated else Task.status == status)

        if filters.assignee_id is not None:
            conditions.append(Task.assignees.any(Identity.id == filters.assignee_id))

        if filters.project_id is not None:
            conditions.append(Task.project_id == filters.project_id)

        department = normalize_department(filters.department)
        if department is not None:
            conditions.append(Task.project.has(_normalized(Project.department) == department))

        if filters.priority is not None:
            conditions.append(Task.priority == filters.priority)

        if filters.review_status is not None:
            conditions.append(Task.review_status == filters.review_status)

        search = (filters.search or "").strip()
        if search:
            pattern = _like_pattern(search)
            conditions.append(
                or_(
                    Task.title.ilike(pattern, escape="\\"),
                    Task.description.ilike(pattern, escape="\\"),
                    Task.brand.ilike(pattern, escape="\\"),
                    Task.tags.ilike(pattern, escape="\\"),
                    Task.project.has(Project.name.ilike(pattern, escape="\\")),
                )
            )

        return conditions

    # -----------------------------------------------------------------------
    # Sorting
    # -----------------------------------------------------------------------

    def order_by(self, sort: SortOrder) -> tuple[UnaryExpression, ...]:
        if sort == SortOrder.ALPHABETICAL:
            return (func.lower(Task.title).asc(), Task.id.asc())
        return (Task.created_at.desc(), Task.id.asc())
