"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import MagicMock

import pytest

from shared.config import Settings
from shared.models import StudentTier, SubscriptionStatus
from modules.auth.access import AccessGate
from modules.auth.passwords import hash_password
from modules.auth.session import SessionResolver
from modules.auth.tokens import TokenService
from modules.billing.interfaces import IBillingProvider
from tests.fakes import InMemoryStudentRepository
from modules.students.models import Student


# Test-only secrets; HS256 keys under 32 bytes trigger PyJWT warnings.
TEST_JWT_SECRET = "test-jwt-secret-for-testing-only-0123456789"
TEST_WEBHOOK_SECRET = "whsec_test_secret"
TEST_PASSWORD = "correct-horse-battery"
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-password-123"


class FrozenClock:
    """Settable clock for token expiry tests."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(scope="session")
def admin_password_hash() -> str:
    return hash_password(ADMIN_PASSWORD, rounds=4)


@pytest.fixture
def settings(admin_password_hash: str) -> Settings:
    """Settings with test secrets and cheap password hashing."""
    return Settings(
        _env_file=None,
        environment="test",
        jwt_secret=TEST_JWT_SECRET,
        admin_email=ADMIN_EMAIL,
        admin_password_hash=admin_password_hash,
        password_hash_rounds=4,
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret=TEST_WEBHOOK_SECRET,
        stripe_price_self_paced="price_self_paced",
        stripe_price_self_paced_installment="price_self_paced_installment",
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def token_service(clock: FrozenClock) -> TokenService:
    return TokenService(TEST_JWT_SECRET, clock=clock)


@pytest.fixture
def repo() -> InMemoryStudentRepository:
    return InMemoryStudentRepository()


@pytest.fixture
def gate() -> AccessGate:
    return AccessGate()


@pytest.fixture
def resolver(token_service, repo, gate) -> SessionResolver:
    return SessionResolver(tokens=token_service, students=repo, gate=gate)


@pytest.fixture
def billing_provider() -> MagicMock:
    """Billing provider double; no network calls."""
    provider = MagicMock(spec=IBillingProvider)
    provider.get_checkout_price_id.return_value = None
    provider.list_invoices.return_value = []
    return provider


@pytest.fixture
def make_student(repo: InMemoryStudentRepository):
    """Factory that stores a student with a known password."""
    password_hash = hash_password(TEST_PASSWORD, rounds=4)

    def _make(
        email: str = "ada@example.com",
        name: str = "Ada",
        tier: StudentTier = StudentTier.MENTORSHIP,
        status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
        billing_customer_ref: Optional[str] = "cus_123",
        billing_subscription_ref: Optional[str] = "sub_123",
    ) -> Student:
        return repo.create_student(
            email=email,
            name=name,
            password_hash=password_hash,
            tier=tier,
            status=status,
            module_count=8,
            billing_customer_ref=billing_customer_ref,
            billing_subscription_ref=billing_subscription_ref,
        )

    return _make
