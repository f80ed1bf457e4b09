"""
Students module data models.

These models define the student, progress, pending enrollment and payment
records held by the credential store, plus the request/response shapes
used by the admin and progress endpoints.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from shared.models import StudentTier, SubscriptionStatus


class PaymentStatus(str, Enum):
    """Outcome recorded for a billing payment."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PENDING = "pending"
    REFUNDED = "refunded"


class Student(BaseModel):
    """
    A student account.

    Students are never hard-deleted; revoking access moves the
    subscription status to canceled.
    """

    id: str = Field(..., description="Student ID (UUID)")
    email: EmailStr = Field(..., description="Email address, stored lowercased")
    name: str = Field(..., description="Display name")
    tier: StudentTier = Field(..., description="Purchased course tier")
    subscription_status: SubscriptionStatus = Field(
        default=SubscriptionStatus.PENDING,
        description="Billing-derived access status",
    )
    billing_customer_ref: Optional[str] = Field(None, description="Stripe customer ID")
    billing_subscription_ref: Optional[str] = Field(None, description="Stripe subscription ID")
    password_hash: Optional[str] = Field(None, exclude=True, repr=False)
    created_at: datetime = Field(..., description="Account creation time")
    updated_at: datetime = Field(..., description="Last update time")
    last_login_at: Optional[datetime] = Field(None, description="Last successful login")


class ModuleProgress(BaseModel):
    """Progress for one course module."""

    student_id: str = Field(..., description="Student ID")
    module_number: int = Field(..., ge=1, description="Module number (1-indexed)")
    completed: bool = Field(default=False)
    completed_at: Optional[datetime] = Field(None)
    time_spent_minutes: int = Field(default=0, ge=0)


class ProgressSummary(BaseModel):
    """A student's progress across all modules."""

    modules: list[ModuleProgress] = Field(..., description="Per-module progress, ordered")
    completed: int = Field(..., description="Completed module count")
    total: int = Field(..., description="Course module count")
    percent: int = Field(..., description="Rounded completion percentage")


class PendingEnrollment(BaseModel):
    """
    Staging record for a checkout whose email has no student yet.

    Keyed by lowercased email; rewritten on every matching checkout.
    """

    email: EmailStr
    name: str
    tier: StudentTier
    billing_customer_ref: Optional[str] = None
    billing_subscription_ref: Optional[str] = None
    checkout_session_ref: Optional[str] = Field(
        None,
        exclude=True,
        repr=False,
        description="Stripe checkout session that created this record; proof of purchase at enrollment",
    )
    created_at: Optional[datetime] = None


class PaymentRecord(BaseModel):
    """Append-only payment log entry written by billing ingestion."""

    id: Optional[str] = Field(None, description="Record ID (assigned by the store)")
    student_id: str
    external_payment_ref: str = Field(..., description="Stripe invoice ID")
    amount: Decimal = Field(..., description="Amount in major currency units")
    status: PaymentStatus
    description: str = ""
    created_at: Optional[datetime] = None


class StudentDetail(BaseModel):
    """Admin view of a single student."""

    student: Student
    progress: list[ModuleProgress]
    payments: list[PaymentRecord]
    modules_completed: int
    progress_percent: int


class StudentListItem(Student):
    """Student row in the admin list, with a completion summary."""

    modules_completed: int = 0
    progress_percent: int = 0


class StudentListResponse(BaseModel):
    """Paginated admin student list."""

    students: list[StudentListItem]
    total: int
    page: int
    page_size: int
    total_pages: int


class RecentSignup(BaseModel):
    """Short student summary for the admin dashboard."""

    id: str
    name: str
    email: EmailStr
    tier: StudentTier
    created_at: datetime


class StudentStats(BaseModel):
    """Aggregate metrics for the admin dashboard."""

    total_students: int
    active_students: int
    past_due_students: int
    self_paced_count: int
    mentorship_count: int
    recent_signups: list[RecentSignup]


# -------------------------------------------------------------------------
# Requests / responses
# -------------------------------------------------------------------------


class CreateStudentRequest(BaseModel):
    """Admin manual enrollment."""

    email: EmailStr
    name: str = Field(..., min_length=1)
    tier: StudentTier
    password: Optional[str] = Field(None, min_length=8)


class EnrollFromPendingRequest(BaseModel):
    """
    Promote a pending enrollment to a student account.

    checkout_session_id is the {CHECKOUT_SESSION_ID} Stripe appends to the
    checkout success URL.
    """

    email: EmailStr
    password: str = Field(..., min_length=8)
    checkout_session_id: Optional[str] = None


class UpdateStudentRequest(BaseModel):
    """Admin edit. Only these fields may change."""

    name: Optional[str] = Field(None, min_length=1)
    tier: Optional[StudentTier] = None
    subscription_status: Optional[SubscriptionStatus] = None


class CreatedStudent(BaseModel):
    """Result of creating a student account."""

    student: Student
    temporary_password: Optional[str] = Field(
        None,
        description="Generated password, returned once when none was supplied",
    )


class ProgressUpdateRequest(BaseModel):
    """Student progress mutation."""

    module_number: int
    completed: Optional[bool] = None
    time_spent: Optional[int] = Field(None, ge=0, description="Minutes to add")
