"""
Students module exceptions.
"""

from shared.exceptions import (
    AcademyError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from shared.models import SubscriptionStatus


class StudentError(AcademyError):
    """Base exception for student-related errors."""

    pass


class StudentNotFoundError(NotFoundError):
    """Raised when a student record does not exist."""

    def __init__(self, student_id: str):
        super().__init__(
            f"Student not found: {student_id}",
            code="STUDENT_NOT_FOUND",
            details={"student_id": student_id},
        )


class EnrollmentNotVerifiedError(AuthenticationError):
    """
    Raised when an enrollment request cannot prove it owns the checkout.

    A missing pending enrollment gives the same error, so the endpoint
    does not reveal which emails have paid.
    """

    def __init__(self):
        super().__init__(
            "Enrollment could not be verified against a completed checkout",
            code="ENROLLMENT_NOT_VERIFIED",
        )


class StudentAlreadyExistsError(ConflictError):
    """Raised when creating a student whose email is already taken."""

    def __init__(self, email: str):
        super().__init__(
            "A student with this email already exists",
            code="STUDENT_ALREADY_EXISTS",
            details={"email": email},
        )


class InvalidModuleError(ValidationError):
    """Raised when a module number is outside the course range."""

    def __init__(self, module_number: int, module_count: int):
        super().__init__(
            f"Invalid module number: {module_number}",
            code="INVALID_MODULE",
            details={"module_number": module_number, "module_count": module_count},
        )


class SubscriptionInactiveError(AuthorizationError):
    """Raised when progress is mutated without an active subscription."""

    def __init__(self, status: SubscriptionStatus):
        super().__init__(
            "Your subscription is not active",
            code="SUBSCRIPTION_INACTIVE",
            details={"subscription_status": status.value},
        )
