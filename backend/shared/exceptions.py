"""
Base exception classes for the Academy backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class AcademyError(Exception):
    """
    Base exception for all Academy errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(AcademyError):
    """Resource not found."""

    pass


class ConflictError(AcademyError):
    """Resource already exists."""

    pass


class ValidationError(AcademyError):
    """Input validation failed."""

    pass


class AuthenticationError(AcademyError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(AcademyError):
    """Authorization failed (insufficient permissions)."""

    pass


class PaymentRequiredError(AcademyError):
    """Access blocked until an outstanding payment is settled."""

    pass


class ExternalServiceError(AcademyError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class StoreUnavailableError(ExternalServiceError):
    """The record store could not be reached or rejected the query."""

    def __init__(self, operation: str, reason: Optional[str] = None):
        super().__init__(
            f"Record store unavailable during {operation}",
            service="store",
            code="STORE_UNAVAILABLE",
            details={"operation": operation, "reason": reason} if reason else {"operation": operation},
        )
