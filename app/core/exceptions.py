"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error events across websocket and HTTP surfaces
- Machine-readable error codes for client handling
- Detailed error information for debugging

Exception Hierarchy:
    BaseApplicationError (base)
    ├── AuthenticationError - Missing/invalid/expired credential (terminal for a socket)
    └── InternalError - Unexpected handler failure

Usage:
    from core.exceptions import AuthenticationError

    raise AuthenticationError(
        "Authentication token has expired",
        error_code="AUTH_TOKEN_EXPIRED",
    )

    # Convert to the realtime error event body
    try:
        identity = authenticator.authenticate(scope)
    except AuthenticationError as e:
        await self.send_json({"type": "error", **e.to_event()})

Note:
    Expected failures inside services are returned as ServiceResult failures
    (see core.services). These exceptions cover the authentication path and
    failures that escape a handler.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (logged, never sent to clients)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_event(self) -> dict[str, Any]:
        """Convert exception to the body of an outbound ``error`` event."""
        return {"message": self.message, "code": self.error_code}

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class AuthenticationError(BaseApplicationError):
    """
    Raised when a credential is missing, malformed, expired or forged.

    Always terminal for a realtime connection: the consumer emits one
    error event and closes the socket.

    Example:
        raise AuthenticationError(
            "No authentication credential provided",
            error_code="AUTH_MISSING_CREDENTIAL",
        )
    """

    default_error_code: str = "AUTH_INVALID"


class InternalError(BaseApplicationError):
    """
    Raised (or synthesized) for unexpected failures inside a handler.

    The original exception is logged server-side; clients only ever see
    the generic message.
    """

    default_error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str = "Internal server error",
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code, details)
