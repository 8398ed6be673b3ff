"""
Error taxonomy for the task service.

Every error carries the HTTP status it maps to and the detail that is safe to
return to the caller. Anything internal (failure kinds, database errors) is
logged, never serialized.
"""

from fastapi import status

INVALID_TOKEN_DETAIL = "Invalid or expired token"
TASK_NOT_FOUND_DETAIL = "Task not found"
TASK_FORBIDDEN_DETAIL = "Not authorized to modify this task"
INTERNAL_ERROR_DETAIL = "Internal server error"


class TaskServiceError(Exception):
    """Base class for errors raised by the task service."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = INTERNAL_ERROR_DETAIL

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class AuthenticationFailure(TaskServiceError):
    """Missing, malformed, expired or badly signed bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    detail = INVALID_TOKEN_DETAIL

    def __init__(self):
        # The public detail is fixed so callers can't tell failure reasons apart
        super().__init__(INVALID_TOKEN_DETAIL)


class ValidationFailure(TaskServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid request"


class NotFoundFailure(TaskServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = TASK_NOT_FOUND_DETAIL


class OwnershipFailure(TaskServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    detail = TASK_FORBIDDEN_DETAIL


class StorageFailure(TaskServiceError):
    """The backing store failed after the allowed retry."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = INTERNAL_ERROR_DETAIL
