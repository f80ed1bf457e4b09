"""
Login, logout and session-check endpoints for students and the admin.

Sessions are carried in HttpOnly cookies; response bodies never contain
the token.
"""

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from shared.config import Settings
from shared.models import AdminPrincipal, StudentPrincipal
from modules.auth.interfaces import IAuthService
from modules.auth.models import (
    AdminSessionResponse,
    LoginRequest,
    StudentSessionResponse,
    TokenKind,
)

from ..dependencies import get_app_settings, get_auth_service
from ..middleware.auth import (
    clear_session_cookie,
    get_current_admin,
    get_current_student,
    set_session_cookie,
)

router = APIRouter()


class StudentLoginResponse(BaseModel):
    """Student login response model."""

    success: bool = True
    student: StudentPrincipal


class SuccessResponse(BaseModel):
    """Bare success response model."""

    success: bool = True


@router.post("/student/login", response_model=StudentLoginResponse)
async def student_login(
    request: LoginRequest,
    response: Response,
    auth: IAuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> StudentLoginResponse:
    """
    Log a student in.

    Returns 401 for bad credentials, 402 when payment is past due and 403
    when the subscription is canceled.
    """
    login = await auth.login_student(request.email, request.password)
    set_session_cookie(
        response,
        TokenKind.STUDENT,
        login.token,
        max_age=settings.student_token_ttl_seconds,
        settings=settings,
    )
    return StudentLoginResponse(student=login.student)


@router.post("/student/logout", response_model=SuccessResponse)
async def student_logout(
    response: Response,
    settings: Settings = Depends(get_app_settings),
) -> SuccessResponse:
    clear_session_cookie(response, TokenKind.STUDENT, settings)
    return SuccessResponse()


@router.get("/student/check", response_model=StudentSessionResponse)
async def student_check(
    student: StudentPrincipal = Depends(get_current_student),
) -> StudentSessionResponse:
    """Report the current student session, re-checking subscription status."""
    return StudentSessionResponse(student=student)


@router.post("/admin/login", response_model=SuccessResponse)
async def admin_login(
    request: LoginRequest,
    response: Response,
    auth: IAuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> SuccessResponse:
    token = await auth.login_admin(request.email, request.password)
    set_session_cookie(
        response,
        TokenKind.ADMIN,
        token,
        max_age=settings.admin_token_ttl_seconds,
        settings=settings,
    )
    return SuccessResponse()


@router.post("/admin/logout", response_model=SuccessResponse)
async def admin_logout(
    response: Response,
    settings: Settings = Depends(get_app_settings),
) -> SuccessResponse:
    clear_session_cookie(response, TokenKind.ADMIN, settings)
    return SuccessResponse()


@router.get("/admin/check", response_model=AdminSessionResponse)
async def admin_check(
    admin: AdminPrincipal = Depends(get_current_admin),
) -> AdminSessionResponse:
    return AdminSessionResponse(role=admin.role)
