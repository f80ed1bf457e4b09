"""
Authentication service implementation.

Email/password login for students (against the student store) and for
the single configured admin (against settings).
"""

from typing import Optional
import asyncio
import logging

from shared.config import Settings
from shared.models import StudentPrincipal
from modules.students.interfaces import IStudentRepository

from .access import AccessGate
from .exceptions import AuthNotConfiguredError, InvalidCredentialsError
from .interfaces import IAuthService
from .models import AdminClaims, StudentClaims, StudentLogin, TokenKind
from .passwords import verify_password
from .tokens import TokenService

logger = logging.getLogger(__name__)


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    A login never changes subscription status. Denied students get the
    gate's exception (402 past due, 403 canceled) after their password
    has been checked, so the denial reveals nothing to a stranger.
    """

    def __init__(
        self,
        tokens: TokenService,
        students: IStudentRepository,
        gate: AccessGate,
        settings: Settings,
    ):
        self._tokens = tokens
        self._students = students
        self._gate = gate
        self._settings = settings

    async def login_student(self, email: str, password: str) -> StudentLogin:
        """
        Authenticate a student and issue a session token.

        Raises:
            AuthNotConfiguredError: No signing secret
            InvalidCredentialsError: Unknown email or wrong password
            SubscriptionCanceledError / PaymentPastDueError: Business denial
        """
        if not self._tokens.is_configured:
            raise AuthNotConfiguredError("jwt_secret")

        student = self._students.get_student_by_email(email)
        if student is None or not await asyncio.to_thread(
            verify_password, password, student.password_hash or ""
        ):
            logger.warning("Failed student login attempt")
            raise InvalidCredentialsError()

        self._gate.enforce(student)

        self._students.touch_last_login(student.id)
        claims = StudentClaims(
            id=student.id,
            email=student.email,
            name=student.name,
            tier=student.tier,
        )
        token = self._tokens.issue(TokenKind.STUDENT, claims)
        logger.info(f"Student logged in: {student.id}")

        return StudentLogin(
            token=token,
            student=StudentPrincipal(
                id=student.id,
                email=student.email,
                name=student.name,
                tier=student.tier,
            ),
        )

    async def login_admin(self, email: str, password: str) -> str:
        """
        Authenticate the admin and issue a session token.

        Raises:
            AuthNotConfiguredError: No signing secret or admin credentials
            InvalidCredentialsError: Wrong email or password
        """
        if not self._tokens.is_configured:
            raise AuthNotConfiguredError("jwt_secret")

        admin_email: Optional[str] = self._settings.admin_email
        admin_hash: Optional[str] = self._settings.admin_password_hash
        if not admin_email or not admin_hash:
            logger.error("Admin login attempted without configured admin credentials")
            raise AuthNotConfiguredError("admin_credentials")

        if email.lower() != admin_email.lower() or not await asyncio.to_thread(
            verify_password, password, admin_hash
        ):
            logger.warning("Failed admin login attempt")
            raise InvalidCredentialsError()

        logger.info("Admin logged in")
        return self._tokens.issue(TokenKind.ADMIN, AdminClaims())
