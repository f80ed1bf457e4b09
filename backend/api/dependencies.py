"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

When we're ready to extract a module to a separate service, we only need
to change the implementation here to an HTTP client.
"""

from typing import TYPE_CHECKING

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.access import AccessGate
    from modules.auth.interfaces import IAuthService
    from modules.auth.session import SessionResolver
    from modules.auth.tokens import TokenService
    from modules.billing.interfaces import IBillingProvider, IBillingWebhookService
    from modules.students.interfaces import IStudentRepository
    from modules.students.service import ProgressService, StudentService


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._student_repository: "IStudentRepository | None" = None
        self._token_service: "TokenService | None" = None
        self._access_gate: "AccessGate | None" = None
        self._session_resolver: "SessionResolver | None" = None
        self._auth_service: "IAuthService | None" = None
        self._billing_provider: "IBillingProvider | None" = None
        self._billing_webhooks: "IBillingWebhookService | None" = None
        self._student_service: "StudentService | None" = None
        self._progress_service: "ProgressService | None" = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def student_repository(self) -> "IStudentRepository":
        """Get the student record store."""
        if self._student_repository is None:
            from modules.students.repository import StudentRepository
            from shared.database import get_supabase_client
            self._student_repository = StudentRepository(get_supabase_client())
        return self._student_repository

    @property
    def token_service(self) -> "TokenService":
        """Get the session token service."""
        if self._token_service is None:
            from modules.auth.tokens import TokenService
            self._token_service = TokenService.from_settings(self.settings)
        return self._token_service

    @property
    def access_gate(self) -> "AccessGate":
        """Get the subscription access gate."""
        if self._access_gate is None:
            from modules.auth.access import AccessGate
            self._access_gate = AccessGate(allow_pending=self.settings.allow_pending_access)
        return self._access_gate

    @property
    def session_resolver(self) -> "SessionResolver":
        """Get the cookie session resolver."""
        if self._session_resolver is None:
            from modules.auth.session import SessionResolver
            self._session_resolver = SessionResolver(
                tokens=self.token_service,
                students=self.student_repository,
                gate=self.access_gate,
            )
        return self._session_resolver

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(
                tokens=self.token_service,
                students=self.student_repository,
                gate=self.access_gate,
                settings=self.settings,
            )
        return self._auth_service

    @property
    def billing_provider(self) -> "IBillingProvider":
        """Get the Stripe client."""
        if self._billing_provider is None:
            from modules.billing.stripe_client import StripeBillingProvider
            self._billing_provider = StripeBillingProvider.from_settings(self.settings)
        return self._billing_provider

    @property
    def billing_webhooks(self) -> "IBillingWebhookService":
        """Get the webhook ingestion service."""
        if self._billing_webhooks is None:
            from modules.billing.service import BillingWebhookService
            self._billing_webhooks = BillingWebhookService(
                provider=self.billing_provider,
                students=self.student_repository,
                settings=self.settings,
            )
        return self._billing_webhooks

    @property
    def students(self) -> "StudentService":
        """Get the student administration service."""
        if self._student_service is None:
            from modules.students.service import StudentService
            self._student_service = StudentService(
                students=self.student_repository,
                billing=self.billing_provider,
                settings=self.settings,
            )
        return self._student_service

    @property
    def progress(self) -> "ProgressService":
        """Get the course progress service."""
        if self._progress_service is None:
            from modules.students.service import ProgressService
            self._progress_service = ProgressService(
                students=self.student_repository,
                settings=self.settings,
            )
        return self._progress_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._settings = None
        self._student_repository = None
        self._token_service = None
        self._access_gate = None
        self._session_resolver = None
        self._auth_service = None
        self._billing_provider = None
        self._billing_webhooks = None
        self._student_service = None
        self._progress_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_app_settings() -> Settings:
    """FastAPI dependency for settings."""
    return get_container().settings


def get_session_resolver() -> "SessionResolver":
    """FastAPI dependency for the session resolver."""
    return get_container().session_resolver


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_billing_webhook_service() -> "IBillingWebhookService":
    """FastAPI dependency for webhook ingestion."""
    return get_container().billing_webhooks


def get_student_service() -> "StudentService":
    """FastAPI dependency for student administration."""
    return get_container().students


def get_progress_service() -> "ProgressService":
    """FastAPI dependency for course progress."""
    return get_container().progress
