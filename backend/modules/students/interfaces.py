"""
Students module interface.

The auth and billing modules depend on IStudentRepository, not on the
Supabase implementation. Tests use an in-memory fake behind the same
protocol.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from shared.models import StudentTier, SubscriptionStatus

from .models import (
    ModuleProgress,
    PaymentRecord,
    PaymentStatus,
    PendingEnrollment,
    Student,
)


@runtime_checkable
class IStudentRepository(Protocol):
    """
    Record store for students and their dependent records.

    Implementations perform no authorization checks and no transition
    validation. Writes to a student's status are last-write-wins.
    Store failures surface as StoreUnavailableError.
    """

    # Students

    def get_student(self, student_id: str) -> Optional[Student]:
        """Get a student by ID, or None."""
        ...

    def get_student_by_email(self, email: str) -> Optional[Student]:
        """Get a student by email (case-insensitive), or None."""
        ...

    def get_student_by_customer_ref(self, customer_ref: str) -> Optional[Student]:
        """Get the student linked to a billing customer, or None."""
        ...

    def create_student(
        self,
        email: str,
        name: str,
        password_hash: str,
        tier: StudentTier,
        status: SubscriptionStatus,
        module_count: int,
        billing_customer_ref: Optional[str] = None,
        billing_subscription_ref: Optional[str] = None,
    ) -> Student:
        """
        Create a student together with one progress record per module.

        Args:
            module_count: Number of course modules; progress records are
                created for module numbers 1..module_count.

        Returns:
            The created Student
        """
        ...

    def update_student(self, student_id: str, fields: dict[str, Any]) -> Optional[Student]:
        """
        Update student fields by model field name and stamp updated_at.

        Returns:
            The updated Student, or None if it does not exist
        """
        ...

    def touch_last_login(self, student_id: str) -> None:
        """Record a successful login."""
        ...

    def list_students(
        self,
        search: Optional[str] = None,
        tier: Optional[StudentTier] = None,
        status: Optional[SubscriptionStatus] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Student], int]:
        """
        List students newest first.

        Args:
            search: Case-insensitive substring of email or name

        Returns:
            (page of students, total matching count)
        """
        ...

    def completed_module_counts(self, student_ids: list[str]) -> dict[str, int]:
        """Number of completed modules per student ID."""
        ...

    def count_students(
        self,
        tier: Optional[StudentTier] = None,
        status: Optional[SubscriptionStatus] = None,
        exclude_status: Optional[SubscriptionStatus] = None,
    ) -> int:
        """Count students matching the given filters."""
        ...

    def recent_students(self, limit: int = 5) -> list[Student]:
        """Most recently created students, newest first."""
        ...

    # Progress

    def list_progress(self, student_id: str) -> list[ModuleProgress]:
        """Progress records for a student ordered by module number."""
        ...

    def update_progress(
        self,
        student_id: str,
        module_number: int,
        fields: dict[str, Any],
    ) -> None:
        """Update one progress record."""
        ...

    # Pending enrollments

    def upsert_pending_enrollment(self, enrollment: PendingEnrollment) -> PendingEnrollment:
        """Insert or overwrite the pending enrollment for enrollment.email."""
        ...

    def get_pending_enrollment(self, email: str) -> Optional[PendingEnrollment]:
        """Get the pending enrollment for an email, or None."""
        ...

    def delete_pending_enrollment(self, email: str) -> None:
        """Remove the pending enrollment for an email if present."""
        ...

    # Payment records

    def list_payments(self, student_id: str) -> list[PaymentRecord]:
        """Payment records for a student, newest first."""
        ...

    def payment_exists(self, external_payment_ref: str, status: PaymentStatus) -> bool:
        """Whether a payment record with this reference and status exists."""
        ...

    def append_payment(self, record: PaymentRecord) -> PaymentRecord:
        """Append a payment record. Records are never updated."""
        ...
