"""
Centralized configuration for the Academy backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings are namespaced (e.g., STRIPE_*, SUPABASE_*).

Secrets have no usable default. In production an empty JWT or webhook
secret fails settings construction, so the process refuses to start.
"""

from functools import lru_cache
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Academy API"
    app_version: str = "0.1.0"
    environment: str = "development"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Session tokens
    jwt_secret: str = ""
    student_token_ttl_seconds: int = 60 * 60 * 24 * 7  # 7 days
    admin_token_ttl_seconds: int = 60 * 60 * 24  # 24 hours

    # Credentials
    admin_email: str = ""
    admin_password_hash: str = ""
    password_hash_rounds: int = 12

    # Access policy
    allow_pending_access: bool = True

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_db_url: str = ""  # Direct Postgres URI, used only by run_migrations.py

    # Stripe
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_price_self_paced: str = ""
    stripe_price_self_paced_installment: str = ""
    default_tier: str = "mentorship"
    reject_stale_billing_events: bool = False

    # Course
    course_module_count: int = 8

    @property
    def is_production(self) -> bool:
        """Whether the process runs with production hardening."""
        return self.environment.lower() == "production"

    @model_validator(mode="after")
    def _require_secrets_in_production(self) -> "Settings":
        if not self.is_production:
            return self
        missing = [
            name
            for name in ("jwt_secret", "stripe_webhook_secret")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                "Missing required secrets for production: " + ", ".join(missing)
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
