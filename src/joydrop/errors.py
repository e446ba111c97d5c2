"""Typed failures raised by joydrop services."""

from http import HTTPStatus


class JoydropError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(JoydropError):
    """A session, post or like does not exist."""

    status_code = HTTPStatus.NOT_FOUND
    error_code = "NOT_FOUND"


class ConflictError(JoydropError):
    """The write would duplicate existing state."""

    status_code = HTTPStatus.CONFLICT
    error_code = "CONFLICT"


class BadRequestError(JoydropError):
    """Invalid state transition or ownership mismatch on a session."""

    status_code = HTTPStatus.BAD_REQUEST
    error_code = "BAD_REQUEST"


class ForbiddenError(JoydropError):
    """The caller does not own the resource."""

    status_code = HTTPStatus.FORBIDDEN
    error_code = "FORBIDDEN"


class UnauthorizedError(JoydropError):
    """Identity verification failed."""

    status_code = HTTPStatus.UNAUTHORIZED
    error_code = "UNAUTHORIZED"


class InternalError(JoydropError):
    """Store or transport failure during a named operation."""

    def __init__(self, operation: str, details: dict[str, object] | None = None) -> None:
        super().__init__(f"Failed to {operation}", details)
        self.operation = operation


class PartialDeleteError(InternalError):
    """A cascading delete stopped after committing some of its chunks."""

    error_code = "PARTIAL_DELETE"

    def __init__(self, operation: str, stage: str, deleted: int) -> None:
        super().__init__(operation, {"stage": stage, "deleted": deleted})
        self.message = f"Failed to {operation}: stopped while deleting {stage}"
        self.stage = stage
        self.deleted = deleted
