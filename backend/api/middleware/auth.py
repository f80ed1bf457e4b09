"""
Cookie session authentication.

Resolves the student_token / admin_token cookies into principals and
sets or clears those cookies on login and logout.
"""

from fastapi import Depends, Request, Response

from shared.config import Settings
from shared.models import AdminPrincipal, StudentPrincipal
from modules.auth.exceptions import InsufficientPermissionsError, MissingTokenError
from modules.auth.models import TokenKind
from modules.auth.session import COOKIE_NAMES, SessionResolver

from ..dependencies import get_session_resolver


def set_session_cookie(
    response: Response,
    kind: TokenKind,
    token: str,
    max_age: int,
    settings: Settings,
) -> None:
    """Attach a session token as an HttpOnly cookie."""
    response.set_cookie(
        key=COOKIE_NAMES[kind],
        value=token,
        max_age=max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response, kind: TokenKind, settings: Settings) -> None:
    """Expire a session cookie."""
    response.delete_cookie(
        key=COOKIE_NAMES[kind],
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


async def get_current_student(
    request: Request,
    resolver: SessionResolver = Depends(get_session_resolver),
) -> StudentPrincipal:
    """
    Dependency that requires an active student session.

    Raises:
        MissingTokenError: No valid student session (401)
        SubscriptionCanceledError / PaymentPastDueError: Denied by the
            access gate (403 / 402)
    """
    student = resolver.resolve_student(request.cookies)
    if student is None:
        raise MissingTokenError()
    return student


async def get_current_admin(
    request: Request,
    resolver: SessionResolver = Depends(get_session_resolver),
) -> AdminPrincipal:
    """
    Dependency that requires an admin session.

    A valid student session is not an admin session: it gets a 403
    rather than a 401.
    """
    admin = resolver.resolve_admin(request.cookies)
    if admin is not None:
        return admin
    if resolver.read_student_claims(request.cookies) is not None:
        raise InsufficientPermissionsError(required_role="admin", user_role="student")
    raise MissingTokenError()


# Type aliases for cleaner route definitions
RequireStudent = Depends(get_current_student)
RequireAdmin = Depends(get_current_admin)
