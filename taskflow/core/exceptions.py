"""
Domain error taxonomy.

Services raise these; the HTTP layer maps them onto status codes using the
same {"code", "message"} detail envelope as HTTPException responses.
"""

from __future__ import annotations

from fastapi import status


class TaskflowError(Exception):
    """Base class for all workflow engine errors."""

    code: str = "TASKFLOW_ERROR"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class NotFound(TaskflowError):
    """Task, identity or project does not exist."""

    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(TaskflowError):
    """The acting identity is not allowed to perform the operation."""

    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidTransition(TaskflowError):
    """The review state machine does not allow the transition from the current state."""

    code = "INVALID_TRANSITION"
    status_code = status.HTTP_409_CONFLICT


class NotReviewer(TaskflowError):
    """The acting identity is not the designated reviewer of the task."""

    code = "NOT_REVIEWER"
    status_code = status.HTTP_403_FORBIDDEN


class ValidationError(TaskflowError):
    """A required field is missing or a parameter is out of range."""

    code = "VALIDATION_ERROR"
    status_code = 422
