"""
Session resolver.

Turns the request's cookie jar into an authenticated principal. Student
and admin sessions live in separate cookies and separate signing domains.
"""

from typing import Mapping, Optional
import logging

from shared.models import AdminPrincipal, StudentPrincipal
from modules.students.interfaces import IStudentRepository

from .access import AccessGate
from .models import AdminClaims, StudentClaims, TokenKind
from .tokens import TokenService

logger = logging.getLogger(__name__)

STUDENT_COOKIE = "student_token"
ADMIN_COOKIE = "admin_token"

COOKIE_NAMES = {
    TokenKind.STUDENT: STUDENT_COOKIE,
    TokenKind.ADMIN: ADMIN_COOKIE,
}


class SessionResolver:
    """
    Resolves cookies to principals.

    The student path re-reads the student record on every call: the token
    carries identity only, never the subscription status.
    """

    def __init__(
        self,
        tokens: TokenService,
        students: IStudentRepository,
        gate: AccessGate,
    ):
        self._tokens = tokens
        self._students = students
        self._gate = gate

    def read_student_claims(self, cookies: Mapping[str, str]) -> Optional[StudentClaims]:
        """Verify the student cookie without consulting the store."""
        token = cookies.get(STUDENT_COOKIE)
        if not token:
            return None
        return self._tokens.verify(token, TokenKind.STUDENT)

    def resolve_student(self, cookies: Mapping[str, str]) -> Optional[StudentPrincipal]:
        """
        Resolve the current student.

        Returns:
            The principal built from the live record, or None when there is
            no valid session or the student record no longer exists

        Raises:
            SubscriptionCanceledError: Authenticated but canceled
            PaymentPastDueError: Authenticated but past due
            SubscriptionPendingError: Authenticated, pending, and pending is blocked
            StoreUnavailableError: The store could not be read
        """
        claims = self.read_student_claims(cookies)
        if claims is None:
            return None

        student = self._students.get_student(claims.id)
        if student is None:
            logger.warning(f"Valid student token for missing record: {claims.id}")
            return None

        self._gate.enforce(student)
        return StudentPrincipal(
            id=student.id,
            email=student.email,
            name=student.name,
            tier=student.tier,
        )

    def resolve_admin(self, cookies: Mapping[str, str]) -> Optional[AdminPrincipal]:
        """Resolve the current admin, or None."""
        token = cookies.get(ADMIN_COOKIE)
        if not token:
            return None
        claims = self._tokens.verify(token, TokenKind.ADMIN)
        if not isinstance(claims, AdminClaims):
            return None
        return AdminPrincipal(role=claims.role)
