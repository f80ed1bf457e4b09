"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from enum import Enum
from typing import Annotated, Literal, Union
from pydantic import BaseModel, EmailStr, Field


class StudentTier(str, Enum):
    """Course package a student purchased."""

    SELF_PACED = "self-paced"
    MENTORSHIP = "mentorship"


class SubscriptionStatus(str, Enum):
    """Billing-derived status gating student access."""

    PENDING = "pending"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"


class StudentPrincipal(BaseModel):
    """
    An authenticated student.

    Rebuilt on every request from a verified session token. Subscription
    status is deliberately absent: it is read live from the store.
    """

    kind: Literal["student"] = "student"
    id: str = Field(..., description="Student ID")
    email: EmailStr = Field(..., description="Student's email address")
    name: str = Field(..., description="Display name")
    tier: StudentTier = Field(..., description="Purchased course tier")

    model_config = {"frozen": True}


class AdminPrincipal(BaseModel):
    """An authenticated administrator."""

    kind: Literal["admin"] = "admin"
    role: str = Field(default="admin", description="Admin role")

    model_config = {"frozen": True}


Principal = Annotated[
    Union[StudentPrincipal, AdminPrincipal],
    Field(discriminator="kind"),
]
