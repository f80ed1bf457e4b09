"""
Students module.

Owns the credential store: student records, per-module progress, pending
enrollments and the append-only payment log. Also hosts the admin and
progress services built on top of it.

Public API:
- IStudentRepository: Interface to the record store
- Student, ModuleProgress, PendingEnrollment, PaymentRecord: Records
- Student exceptions: StudentNotFoundError, InvalidModuleError, etc.
"""

from .interfaces import IStudentRepository
from .models import (
    Student,
    ModuleProgress,
    ProgressSummary,
    PendingEnrollment,
    PaymentRecord,
    PaymentStatus,
    StudentDetail,
    StudentStats,
)
from .exceptions import (
    StudentError,
    StudentNotFoundError,
    EnrollmentNotVerifiedError,
    StudentAlreadyExistsError,
    InvalidModuleError,
    SubscriptionInactiveError,
)

__all__ = [
    # Interface
    "IStudentRepository",
    # Models
    "Student",
    "ModuleProgress",
    "ProgressSummary",
    "PendingEnrollment",
    "PaymentRecord",
    "PaymentStatus",
    "StudentDetail",
    "StudentStats",
    # Exceptions
    "StudentError",
    "StudentNotFoundError",
    "EnrollmentNotVerifiedError",
    "StudentAlreadyExistsError",
    "InvalidModuleError",
    "SubscriptionInactiveError",
]
