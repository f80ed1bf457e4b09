"""
Shared infrastructure for the Academy backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- models: Principals and the tier/status enums every module speaks

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    AcademyError,
    NotFoundError,
    ConflictError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    PaymentRequiredError,
    ExternalServiceError,
    StoreUnavailableError,
)
from .models import (
    AdminPrincipal,
    Principal,
    StudentPrincipal,
    StudentTier,
    SubscriptionStatus,
)

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "AcademyError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "PaymentRequiredError",
    "ExternalServiceError",
    "StoreUnavailableError",
    "AdminPrincipal",
    "Principal",
    "StudentPrincipal",
    "StudentTier",
    "SubscriptionStatus",
]
