"""
Fixtures for API tests.

The app is wired to an in-memory student store and a mocked billing
provider through a test ServiceContainer and dependency overrides.
"""

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import (
    ServiceContainer,
    get_app_settings,
    get_auth_service,
    get_billing_webhook_service,
    get_progress_service,
    get_session_resolver,
    get_student_service,
)
from modules.auth.models import AdminClaims, StudentClaims, TokenKind
from modules.auth.session import ADMIN_COOKIE, STUDENT_COOKIE


@pytest.fixture
def container(settings, repo, billing_provider) -> ServiceContainer:
    container = ServiceContainer(settings)
    container._student_repository = repo
    container._billing_provider = billing_provider
    return container


@pytest.fixture
def app(container):
    """Create a fresh app for each test."""
    app = create_app()
    app.dependency_overrides[get_app_settings] = lambda: container.settings
    app.dependency_overrides[get_session_resolver] = lambda: container.session_resolver
    app.dependency_overrides[get_auth_service] = lambda: container.auth
    app.dependency_overrides[get_billing_webhook_service] = lambda: container.billing_webhooks
    app.dependency_overrides[get_student_service] = lambda: container.students
    app.dependency_overrides[get_progress_service] = lambda: container.progress
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def student_cookie(container):
    """Build a student session cookie for a stored student."""

    def _cookie(student) -> dict[str, str]:
        claims = StudentClaims(
            id=student.id,
            email=student.email,
            name=student.name,
            tier=student.tier,
        )
        return {STUDENT_COOKIE: container.token_service.issue(TokenKind.STUDENT, claims)}

    return _cookie


@pytest.fixture
def admin_client(client, container) -> TestClient:
    """Client carrying a valid admin session."""
    client.cookies.set(ADMIN_COOKIE, container.token_service.issue(TokenKind.ADMIN, AdminClaims()))
    return client
