"""
Centralized configuration for the Solutil backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., JWT_*, SUPABASE_*).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


# Used only when no operator secret is configured, so the process still boots.
# Anything signed with it must be considered forgeable.
DEFAULT_JWT_SECRET = "solutil-insecure-development-secret-override-me"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Solutil API"
    app_version: str = "0.1.0"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Bearer credentials
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_expire_seconds: int = 7 * 24 * 60 * 60

    # Reserved platform admin identity (never stored with ordinary users)
    admin_subject_id: str = "admin"
    admin_email: str = ""
    admin_password: str = ""
    admin_display_name: str = "Platform Admin"

    # Rate limiting
    rate_limit_max_attempts: int = 5
    rate_limit_window_seconds: int = 15 * 60
    rate_limit_max_keys: int = 10_000

    # Supabase (primary user/application store)
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    users_table: str = "users"
    applications_table: str = "provider_applications"

    # Force the in-memory fallback store even when Supabase is configured
    use_fallback_store: bool = False
    # Seconds between retries of the primary store during an outage
    store_retry_seconds: int = 30

    @property
    def uses_default_secret(self) -> bool:
        """True when no operator-supplied JWT secret is configured."""
        return self.jwt_secret == DEFAULT_JWT_SECRET

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local", "test")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
