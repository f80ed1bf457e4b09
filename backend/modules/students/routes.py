"""
Student administration endpoints.

Everything here requires an admin session except enrollment, which is
how a student who paid at checkout sets their password.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_student_service
from api.middleware.auth import get_current_admin
from shared.models import AdminPrincipal, StudentTier, SubscriptionStatus
from modules.billing.models import InvoiceSummary

from .models import (
    CreatedStudent,
    CreateStudentRequest,
    EnrollFromPendingRequest,
    Student,
    StudentDetail,
    StudentListResponse,
    UpdateStudentRequest,
)
from .service import StudentService

router = APIRouter()


@router.post("", response_model=CreatedStudent, status_code=201)
async def create_student(
    request: CreateStudentRequest,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: StudentService = Depends(get_student_service),
) -> CreatedStudent:
    """
    Manually enroll a student.

    The account starts active. When no password is given, a temporary one
    is generated and returned once.
    """
    return await service.create_student(
        email=request.email,
        name=request.name,
        tier=request.tier,
        password=request.password,
    )


@router.get("", response_model=StudentListResponse)
async def list_students(
    search: Optional[str] = Query(default=None, description="Match email or name"),
    tier: Optional[StudentTier] = Query(default=None, description="Filter by tier"),
    status: Optional[SubscriptionStatus] = Query(default=None, description="Filter by status"),
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(default=20, ge=1, le=100, description="Items per page"),
    admin: AdminPrincipal = Depends(get_current_admin),
    service: StudentService = Depends(get_student_service),
) -> StudentListResponse:
    """List students, most recent first."""
    return await service.list_students(search, tier, status, page, page_size)


@router.post("/enroll", response_model=Student, status_code=201)
async def enroll_from_pending(
    request: EnrollFromPendingRequest,
    service: StudentService = Depends(get_student_service),
) -> Student:
    """
    Turn a paid checkout's pending enrollment into an account.

    No session is needed; the checkout session ID is the credential.
    """
    return await service.enroll_from_pending(
        request.email,
        request.password,
        checkout_session_id=request.checkout_session_id,
    )


@router.get("/{student_id}", response_model=StudentDetail)
async def get_student(
    student_id: str,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: StudentService = Depends(get_student_service),
) -> StudentDetail:
    return await service.get_student_detail(student_id)


@router.patch("/{student_id}", response_model=Student)
async def update_student(
    student_id: str,
    request: UpdateStudentRequest,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: StudentService = Depends(get_student_service),
) -> Student:
    """
    Edit name, tier or subscription status.

    Status changes are unconstrained here, including out of canceled.
    """
    return await service.update_student(student_id, request)


@router.delete("/{student_id}", response_model=Student)
async def revoke_student(
    student_id: str,
    cancel_billing: bool = Query(default=False, description="Also cancel the Stripe subscription"),
    admin: AdminPrincipal = Depends(get_current_admin),
    service: StudentService = Depends(get_student_service),
) -> Student:
    """Revoke access. The record is kept with status canceled."""
    return await service.revoke_access(student_id, cancel_billing=cancel_billing)


@router.get("/{student_id}/invoices", response_model=list[InvoiceSummary])
async def list_invoices(
    student_id: str,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: StudentService = Depends(get_student_service),
) -> list[InvoiceSummary]:
    return await service.list_invoices(student_id)
