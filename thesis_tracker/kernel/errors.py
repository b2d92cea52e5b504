"""
Workflow errors raised by services and rendered by the API layer.

Each error carries the HTTP status it maps to and a stable machine code;
``thesis_tracker.main`` turns them into ``{"detail": ..., "code": ...}``.
"""

from fastapi import status


class WorkflowError(Exception):
    """Base class for rule violations surfaced to the caller."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "workflow_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.detail!r})"


class BadRequest(WorkflowError):
    """Invalid input or cardinality."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"


class Forbidden(WorkflowError):
    """Role, lock or deadline violation."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class NotFound(WorkflowError):
    """Missing thesis, submission, attachment or comment."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class InternalError(WorkflowError):
    """Persistence produced an unexpected result."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"
