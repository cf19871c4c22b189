"""
Authorization policy for task mutations.
"""

from __future__ import annotations

from taskflow.core.exceptions import Forbidden
from taskflow.models.identity import Identity
from taskflow.models.task import ReviewStatus, Task


def can_modify(identity: Identity, task: Task) -> bool:
    """
    Admins and super-admins may modify any task; otherwise assignees may,
    and so may the reviewer while the task is under review.
    """
    if identity.is_admin:
        return True
    if identity.id in task.assignee_ids:
        return True
    return task.review_status == ReviewStatus.UNDER_REVIEW and task.reviewer_id == identity.id


def ensure_can_modify(identity: Identity, task: Task) -> None:
    if not can_modify(identity, task):
        raise Forbidden(f"Identity {identity.id} may not modify task {task.id}")
