"""
Identity and project directory lookups.

Both directories are owned by external systems and mirrored into the
identities/projects tables; this core only reads them.
"""

from __future__ import annotations

from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.exceptions import NotFound
from taskflow.models.identity import Identity
from taskflow.models.project import Project


def normalize_department(department: str | None) -> str | None:
    """Departments compare case-insensitively with surrounding whitespace ignored."""
    if department is None:
        return None
    normalized = department.strip().lower()
    return normalized or None


class IdentityDirectory:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_identity(self, identity_id: UUID, *, active_only: bool = True) -> Identity:
        identity = await self.db.get(Identity, identity_id)
        if identity is None or (active_only and not identity.is_active):
            raise NotFound(f"Identity {identity_id} not found")
        return identity

    async def get_identities(self, identity_ids: Iterable[UUID]) -> list[Identity]:
        """Resolve every id, preserving the caller's order and dropping duplicates."""
        wanted = list(dict.fromkeys(identity_ids))
        if not wanted:
            return []

        result = await self.db.execute(
            select(Identity).where(Identity.id.in_(wanted), Identity.is_active.is_(True))
        )
        found = {identity.id: identity for identity in result.scalars().all()}

        missing = [str(i) for i in wanted if i not in found]
        if missing:
            raise NotFound(f"Identities not found: {', '.join(missing)}")
        return [found[i] for i in wanted]


class ProjectDirectory:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_project(self, project_id: UUID) -> Project:
        project = await self.db.get(Project, project_id)
        if project is None:
            raise NotFound(f"Project {project_id} not found")
        return project
