"""
Error types and operation results for the ReviewHub client.

Internally the client raises ReviewHubError subclasses. The session manager
and the gateway never let them escape: each public operation converts them
into a Result that the caller inspects.
"""

import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from loguru import logger


T = TypeVar("T")


class ErrorCode(str, Enum):
    """Failure category carried by a Result."""
    VALIDATION = "VALIDATION_ERROR"
    AUTHENTICATION = "AUTHENTICATION_ERROR"
    AUTHORIZATION = "AUTHORIZATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    SERVER_VALIDATION = "SERVER_VALIDATION_ERROR"
    SERVER = "SERVER_ERROR"
    TRANSPORT = "TRANSPORT_ERROR"
    STORAGE = "STORAGE_ERROR"
    INTERNAL = "INTERNAL_ERROR"


# =============================================================================
# Exceptions
# =============================================================================

class ReviewHubError(Exception):
    """Base exception for ReviewHub client errors."""

    # Server-provided messages are shown to the user for these categories;
    # the rest collapse to the operation's generic message.
    user_facing: bool = True

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class ValidationError(ReviewHubError):
    """Input rejected on the client before any request was sent."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message=message, code=ErrorCode.VALIDATION)
        self.field = field


class AuthenticationError(ReviewHubError):
    """Missing, expired or invalid credentials."""

    def __init__(self, message: str = "Not authenticated", status_code: Optional[int] = None):
        super().__init__(
            message=message,
            code=ErrorCode.AUTHENTICATION,
            status_code=status_code,
        )


class AuthorizationError(ReviewHubError):
    """Authenticated, but the role does not allow the operation."""

    def __init__(self, message: str = "Not authorized", status_code: int = 403):
        super().__init__(
            message=message,
            code=ErrorCode.AUTHORIZATION,
            status_code=status_code,
        )


class NotFoundError(ReviewHubError):
    """Resource not found on the server."""

    def __init__(self, message: str = "Not found", status_code: int = 404):
        super().__init__(
            message=message,
            code=ErrorCode.NOT_FOUND,
            status_code=status_code,
        )


class ServerValidationError(ReviewHubError):
    """The server rejected the request payload."""

    def __init__(self, message: str, status_code: int = 422):
        super().__init__(
            message=message,
            code=ErrorCode.SERVER_VALIDATION,
            status_code=status_code,
        )


class ServerError(ReviewHubError):
    """5xx responses and malformed response bodies."""

    user_facing = False

    def __init__(self, message: str = "Server error", status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(
            message=message,
            code=ErrorCode.SERVER,
            status_code=status_code,
            detail=detail,
        )


class TransportError(ReviewHubError):
    """Network failure: connection refused, DNS, timeout, reset."""

    user_facing = False

    def __init__(self, message: str = "Network error", detail: Optional[str] = None):
        super().__init__(message=message, code=ErrorCode.TRANSPORT, detail=detail)


class StorageError(ReviewHubError):
    """Reading or writing the persisted session failed."""

    user_facing = False

    def __init__(self, message: str = "Session storage failure", detail: Optional[str] = None):
        super().__init__(message=message, code=ErrorCode.STORAGE, detail=detail)


# =============================================================================
# Result
# =============================================================================

@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a client operation.

    Exactly one of data/error is meaningful: data when success is True,
    error (a human-readable message) and code otherwise.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    code: Optional[ErrorCode] = None

    @classmethod
    def ok(cls, data: Any = None) -> "Result":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, code: ErrorCode = ErrorCode.INTERNAL) -> "Result":
        return cls(success=False, error=error, code=code)

    @classmethod
    def from_exception(cls, exc: Exception, fallback: str) -> "Result":
        """
        Collapse an exception into a failed Result.

        Args:
            exc: The raised exception
            fallback: Message used when the error carries nothing user-facing

        Returns:
            Failed Result
        """
        if isinstance(exc, ReviewHubError):
            message = exc.message if exc.user_facing and exc.message else fallback
            return cls.fail(message, exc.code)

        logger.error(
            f"Unexpected error: {type(exc).__name__}: {exc}\n{traceback.format_exc()}"
        )
        return cls.fail(fallback, ErrorCode.INTERNAL)

    def __bool__(self) -> bool:
        return self.success
