"""Exception types raised by the Conversion Tools client."""

from __future__ import annotations

from typing import Any, Optional

from conversiontools.core.models import RateLimits


class ConversionToolsError(RuntimeError):
    """Base class for every error surfaced by the Conversion Tools API client."""

    def __init__(
        self,
        message: str,
        code: str = "API_ERROR",
        status: int | None = None,
        response: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.response = response


class ValidationError(ConversionToolsError):
    """Invalid request parameters, rejected locally or by the server."""

    def __init__(self, message: str, response: Any = None) -> None:
        super().__init__(message, "VALIDATION_ERROR", 400, response)


class AuthenticationError(ConversionToolsError):
    """Missing or invalid API token."""

    def __init__(self, message: str = "Not authorized - Invalid or missing API token") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR", 401)


class NotFoundError(ConversionToolsError):
    def __init__(self, message: str = "Not found", code: str = "NOT_FOUND") -> None:
        super().__init__(message, code, 404)


class RemoteFileNotFoundError(NotFoundError):
    def __init__(self, message: str = "File not found", file_id: str | None = None) -> None:
        super().__init__(message, "FILE_NOT_FOUND")
        self.file_id = file_id


class TaskNotFoundError(NotFoundError):
    def __init__(self, message: str = "Task not found", task_id: str | None = None) -> None:
        super().__init__(message, "TASK_NOT_FOUND")
        self.task_id = task_id


class RateLimitError(ConversionToolsError):
    """Quota exceeded; carries the last rate limits seen, if any."""

    def __init__(self, message: str, limits: Optional[RateLimits] = None) -> None:
        super().__init__(message, "RATE_LIMIT_EXCEEDED", 429)
        self.limits = limits


class RequestTimeoutError(ConversionToolsError):
    """A request or a polling loop ran out of time, or was aborted."""

    def __init__(
        self,
        message: str = "Operation timed out",
        timeout: float | None = None,
        aborted: bool = False,
    ) -> None:
        super().__init__(message, "TIMEOUT_ERROR", 408)
        self.timeout = timeout
        self.aborted = aborted


class NetworkError(ConversionToolsError):
    """Transport-level failure (DNS, refused connection, reset, ...)."""

    def __init__(self, message: str, original_error: BaseException | None = None) -> None:
        super().__init__(message, "NETWORK_ERROR")
        self.original_error = original_error


class ConversionError(ConversionToolsError):
    """A task finished in the ERROR state or has no result to download."""

    def __init__(
        self,
        message: str,
        task_id: str | None = None,
        task_error: str | None = None,
    ) -> None:
        super().__init__(message, "CONVERSION_ERROR")
        self.task_id = task_id
        self.task_error = task_error
