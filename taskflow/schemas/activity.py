"""
Activity log schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel


class ActivityResponse(BaseModel):
    id: UUID
    kind: str
    task_id: UUID
    actor_id: UUID
    payload: dict[str, Any]
    created_at: datetime

    model_config = {"from_attributes": True}


class ActivityListResponse(BaseModel):
    """Response for GET /tasks/{task_id}/activity."""

    activities: list[ActivityResponse]
    total: int
