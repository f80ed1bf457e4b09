"""
Authentication module data models.

These models define the signed token claims, the access decision
returned by the gate, and the login request/response shapes.
"""

from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, EmailStr, Field

from shared.models import StudentPrincipal, StudentTier


class TokenKind(str, Enum):
    """
    Signing domain of a session token.

    The kind is embedded in the signed payload; a token only verifies
    against the kind the caller expects.
    """

    STUDENT = "student"
    ADMIN = "admin"


class StudentClaims(BaseModel):
    """Claims carried by a student session token."""

    id: str = Field(..., description="Student ID")
    email: EmailStr = Field(..., description="Student's email")
    name: str = Field(..., description="Display name")
    tier: StudentTier = Field(..., description="Tier at issuance time")

    model_config = {"frozen": True, "extra": "ignore"}


class AdminClaims(BaseModel):
    """Claims carried by an admin session token."""

    role: str = Field(default="admin", description="Admin role")

    model_config = {"frozen": True, "extra": "ignore"}


TokenClaims = Union[StudentClaims, AdminClaims]


class DenialReason(str, Enum):
    """Why the access gate refused a request."""

    UNAUTHENTICATED = "unauthenticated"
    SUBSCRIPTION_CANCELED = "subscription_canceled"
    PAYMENT_PAST_DUE = "payment_past_due"
    SUBSCRIPTION_PENDING = "subscription_pending"


class AccessDecision(BaseModel):
    """
    Verdict of the access gate.

    billing_customer_ref is only populated for PAYMENT_PAST_DUE so the
    caller can build a payment-update link for the student.
    """

    allowed: bool
    reason: Optional[DenialReason] = None
    billing_customer_ref: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(
        cls,
        reason: DenialReason,
        billing_customer_ref: Optional[str] = None,
    ) -> "AccessDecision":
        return cls(allowed=False, reason=reason, billing_customer_ref=billing_customer_ref)


class LoginRequest(BaseModel):
    """Email/password login for either principal kind."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class StudentLogin(BaseModel):
    """Result of a successful student login."""

    token: str = Field(..., repr=False)
    student: StudentPrincipal


class StudentSessionResponse(BaseModel):
    """Session-check response for students."""

    authenticated: bool = True
    student: StudentPrincipal


class AdminSessionResponse(BaseModel):
    """Session-check response for admins."""

    authenticated: bool = True
    role: str = "admin"
