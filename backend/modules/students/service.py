"""
Student administration and progress services.

StudentService backs the admin console: manual enrollment, onboarding of
pending enrollments, edits, unconstrained status changes, soft deletion
and dashboard metrics. ProgressService backs the student dashboard.
"""

from datetime import datetime, timezone
from typing import Optional
import asyncio
import logging
import secrets

from shared.config import Settings
from shared.models import StudentPrincipal, StudentTier, SubscriptionStatus
from modules.auth.passwords import generate_random_password, hash_password
from modules.billing.exceptions import BillingProviderError, NoBillingCustomerError
from modules.billing.interfaces import IBillingProvider
from modules.billing.models import InvoiceSummary

from .exceptions import (
    InvalidModuleError,
    EnrollmentNotVerifiedError,
    StudentAlreadyExistsError,
    StudentNotFoundError,
    SubscriptionInactiveError,
)
from .interfaces import IStudentRepository
from .models import (
    CreatedStudent,
    ModuleProgress,
    ProgressSummary,
    RecentSignup,
    Student,
    StudentDetail,
    StudentListItem,
    StudentListResponse,
    StudentStats,
    UpdateStudentRequest,
)

logger = logging.getLogger(__name__)


def completion_percent(completed: int, total: int) -> int:
    """Completion percentage rounded half up."""
    if total <= 0:
        return 0
    return (completed * 100 + total // 2) // total


class StudentService:
    """Admin operations on student accounts."""

    def __init__(
        self,
        students: IStudentRepository,
        billing: IBillingProvider,
        settings: Settings,
    ):
        self._students = students
        self._billing = billing
        self._module_count = settings.course_module_count
        self._password_rounds = settings.password_hash_rounds

    def _require(self, student_id: str) -> Student:
        student = self._students.get_student(student_id)
        if student is None:
            raise StudentNotFoundError(student_id)
        return student

    async def create_student(
        self,
        email: str,
        name: str,
        tier: StudentTier,
        password: Optional[str] = None,
        billing_customer_ref: Optional[str] = None,
        billing_subscription_ref: Optional[str] = None,
    ) -> CreatedStudent:
        """
        Create an active student with a full progress batch.

        A temporary password is generated when none is given and returned
        once in the result.

        Raises:
            StudentAlreadyExistsError: If the email is taken
        """
        if self._students.get_student_by_email(email) is not None:
            raise StudentAlreadyExistsError(email.lower())

        temporary_password = None
        if not password:
            temporary_password = generate_random_password()
            password = temporary_password

        student = self._students.create_student(
            email=email,
            name=name,
            password_hash=await asyncio.to_thread(hash_password, password, self._password_rounds),
            tier=tier,
            status=SubscriptionStatus.ACTIVE,
            module_count=self._module_count,
            billing_customer_ref=billing_customer_ref,
            billing_subscription_ref=billing_subscription_ref,
        )
        logger.info(f"Created student {student.id} ({tier.value})")
        return CreatedStudent(student=student, temporary_password=temporary_password)

    async def enroll_from_pending(
        self,
        email: str,
        password: str,
        checkout_session_id: Optional[str] = None,
    ) -> Student:
        """
        Promote a pending enrollment to a student account.

        The caller proves the purchase with the checkout session ID recorded
        when the checkout webhook created the pending enrollment.

        Raises:
            EnrollmentNotVerifiedError: No pending enrollment for the email,
                or the checkout session does not match
            StudentAlreadyExistsError: A student already has the email
        """
        pending = self._students.get_pending_enrollment(email)
        if (
            pending is None
            or not pending.checkout_session_ref
            or not checkout_session_id
            or not secrets.compare_digest(
                pending.checkout_session_ref.encode(), checkout_session_id.encode()
            )
        ):
            logger.warning("Rejected unverified enrollment attempt")
            raise EnrollmentNotVerifiedError()

        created = await self.create_student(
            email=pending.email,
            name=pending.name,
            tier=pending.tier,
            password=password,
            billing_customer_ref=pending.billing_customer_ref,
            billing_subscription_ref=pending.billing_subscription_ref,
        )
        self._students.delete_pending_enrollment(pending.email)
        return created.student

    async def list_students(
        self,
        search: Optional[str] = None,
        tier: Optional[StudentTier] = None,
        status: Optional[SubscriptionStatus] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> StudentListResponse:
        """Paginated, filtered student list with completion summaries."""
        students, total = self._students.list_students(
            search=search,
            tier=tier,
            status=status,
            offset=(page - 1) * page_size,
            limit=page_size,
        )
        completed = self._students.completed_module_counts([s.id for s in students])
        items = [
            StudentListItem(
                **s.model_dump(),
                modules_completed=completed.get(s.id, 0),
                progress_percent=completion_percent(completed.get(s.id, 0), self._module_count),
            )
            for s in students
        ]
        return StudentListResponse(
            students=items,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=(total + page_size - 1) // page_size,
        )

    async def get_student_detail(self, student_id: str) -> StudentDetail:
        """Student record with progress, payments and completion summary."""
        student = self._require(student_id)
        progress = self._students.list_progress(student_id)
        completed = sum(1 for module in progress if module.completed)
        return StudentDetail(
            student=student,
            progress=progress,
            payments=self._students.list_payments(student_id),
            modules_completed=completed,
            progress_percent=completion_percent(completed, self._module_count),
        )

    async def update_student(self, student_id: str, request: UpdateStudentRequest) -> Student:
        """Apply an admin edit; status changes go through set_status."""
        self._require(student_id)

        fields = {}
        if request.name is not None:
            fields["name"] = request.name
        if request.tier is not None:
            fields["tier"] = request.tier

        student = None
        if fields:
            student = self._students.update_student(student_id, fields)
        if request.subscription_status is not None:
            student = await self.set_status(student_id, request.subscription_status)

        return student or self._require(student_id)

    async def set_status(self, student_id: str, status: SubscriptionStatus) -> Student:
        """
        Set a student's subscription status.

        Admin override: any status may move to any status, including out
        of canceled.
        """
        current = self._require(student_id)
        student = self._students.update_student(student_id, {"subscription_status": status})
        if student is None:
            raise StudentNotFoundError(student_id)
        logger.info(
            f"Admin set student {student_id} status "
            f"{current.subscription_status.value} -> {status.value}"
        )
        return student

    async def revoke_access(self, student_id: str, cancel_billing: bool = False) -> Student:
        """
        Soft-delete a student by moving them to canceled.

        With cancel_billing, the Stripe subscription is canceled first; a
        Stripe failure is logged and does not block the revocation.
        """
        student = self._require(student_id)

        if cancel_billing and student.billing_subscription_ref:
            try:
                self._billing.cancel_subscription(student.billing_subscription_ref)
            except BillingProviderError as e:
                logger.error(f"Error canceling Stripe subscription for {student_id}: {e.message}")

        return await self.set_status(student_id, SubscriptionStatus.CANCELED)

    async def list_invoices(self, student_id: str) -> list[InvoiceSummary]:
        """Stripe invoices for the student's billing customer."""
        student = self._require(student_id)
        if not student.billing_customer_ref:
            raise NoBillingCustomerError(student_id)
        return self._billing.list_invoices(student.billing_customer_ref)

    async def get_stats(self) -> StudentStats:
        """Aggregate metrics for the admin dashboard."""
        repo = self._students
        return StudentStats(
            total_students=repo.count_students(),
            active_students=repo.count_students(status=SubscriptionStatus.ACTIVE),
            past_due_students=repo.count_students(status=SubscriptionStatus.PAST_DUE),
            self_paced_count=repo.count_students(
                tier=StudentTier.SELF_PACED,
                exclude_status=SubscriptionStatus.CANCELED,
            ),
            mentorship_count=repo.count_students(
                tier=StudentTier.MENTORSHIP,
                exclude_status=SubscriptionStatus.CANCELED,
            ),
            recent_signups=[
                RecentSignup(
                    id=s.id,
                    name=s.name,
                    email=s.email,
                    tier=s.tier,
                    created_at=s.created_at,
                )
                for s in repo.recent_students(limit=5)
            ],
        )


class ProgressService:
    """Student-facing course progress."""

    def __init__(self, students: IStudentRepository, settings: Settings):
        self._students = students
        self._module_count = settings.course_module_count

    async def get_progress(self, student: StudentPrincipal) -> ProgressSummary:
        modules = self._students.list_progress(student.id)
        completed = sum(1 for module in modules if module.completed)
        return ProgressSummary(
            modules=modules,
            completed=completed,
            total=self._module_count,
            percent=completion_percent(completed, self._module_count),
        )

    async def update_progress(
        self,
        student: StudentPrincipal,
        module_number: int,
        completed: Optional[bool] = None,
        time_spent: Optional[int] = None,
    ) -> ModuleProgress:
        """
        Update one module's progress.

        Only active students may record progress. time_spent is added to
        the stored total, so the total never decreases.

        Raises:
            SubscriptionInactiveError: Status is not active
            InvalidModuleError: Module number outside 1..module_count
        """
        record = self._students.get_student(student.id)
        if record is None:
            raise StudentNotFoundError(student.id)
        if record.subscription_status != SubscriptionStatus.ACTIVE:
            raise SubscriptionInactiveError(record.subscription_status)

        if not 1 <= module_number <= self._module_count:
            raise InvalidModuleError(module_number, self._module_count)

        modules = {m.module_number: m for m in self._students.list_progress(student.id)}
        current = modules.get(module_number)
        if current is None:
            raise InvalidModuleError(module_number, self._module_count)

        fields = {}
        if completed is not None:
            fields["completed"] = completed
            fields["completed_at"] = datetime.now(timezone.utc) if completed else None
        if time_spent and time_spent > 0:
            fields["time_spent_minutes"] = current.time_spent_minutes + time_spent

        if fields:
            self._students.update_progress(student.id, module_number, fields)
        return current.model_copy(update=fields)
