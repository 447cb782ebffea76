"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly,
in particular the session secret key.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SessionSettings(BaseSettings):
    """Session cookie settings.

    Environment variables:
        TENANT_EDGE_SESSION_COOKIE: Fallback cookie name used when no frontend
            domain can be detected (default: csl_session)
        TENANT_EDGE_SESSION_SECRET_KEY: Key used to sign session cookies
        TENANT_EDGE_SESSION_LIFETIME_MINUTES: Session lifetime (default: 120)
        TENANT_EDGE_SESSION_SECURE: Mark cookies Secure (default: true)
        TENANT_EDGE_SESSION_SAME_SITE: SameSite policy (default: lax)
        TENANT_EDGE_SESSION_HTTP_ONLY: Mark the session cookie HttpOnly (default: true)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANT_EDGE_SESSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    cookie: str = Field(
        default="csl_session",
        description="Default session cookie name for non tenant-scoped traffic",
        min_length=1,
    )
    secret_key: SecretStr = Field(
        default=SecretStr("change-me-in-production"),
        description="Secret used to sign session cookies",
    )
    lifetime_minutes: int = Field(
        default=120,
        description="Session lifetime in minutes",
        ge=1,
    )
    secure: bool = Field(default=True, description="Send cookies over HTTPS only")
    same_site: Literal["lax", "strict", "none"] = Field(
        default="lax",
        description="SameSite attribute for session and XSRF cookies",
    )
    http_only: bool = Field(
        default=True,
        description="Hide the session cookie from JavaScript",
    )

    @model_validator(mode="after")
    def validate_same_site(self) -> "SessionSettings":
        """Browsers drop SameSite=None cookies that are not Secure."""
        if self.same_site == "none" and not self.secure:
            raise ValueError("same_site='none' requires secure=true")
        return self

    @property
    def lifetime_seconds(self) -> int:
        """Session lifetime expressed in seconds."""
        return self.lifetime_minutes * 60


class CorsSettings(BaseSettings):
    """Static parts of the CORS policy.

    Allowed origins are not configured here: they are computed per request
    from the tenant registry.

    Environment variables:
        TENANT_EDGE_CORS_ALLOW_METHODS: Methods answered in preflight responses
        TENANT_EDGE_CORS_ALLOW_HEADERS: Headers answered in preflight responses
        TENANT_EDGE_CORS_EXPOSE_HEADERS: Headers exposed to frontend JavaScript
        TENANT_EDGE_CORS_MAX_AGE: Preflight cache lifetime in seconds (default: 600)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANT_EDGE_CORS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        description="Methods allowed for credentialed cross-origin requests",
    )
    allow_headers: list[str] = Field(
        default=[
            "Accept",
            "Authorization",
            "Content-Type",
            "X-Frontend-Domain",
            "X-Requested-With",
            "X-XSRF-TOKEN",
        ],
        description="Request headers allowed in preflight responses",
    )
    expose_headers: list[str] = Field(
        default=["X-Request-ID"],
        description="Response headers readable by frontend JavaScript",
    )
    max_age: int = Field(
        default=600,
        description="Preflight cache lifetime in seconds",
        ge=0,
    )


class TenancySettings(BaseSettings):
    """Tenant resolution and branding settings.

    Environment variables:
        TENANT_EDGE_TENANCY_REGISTRY_CACHE_TTL_SECONDS: Hostname cache TTL (default: 300)
        TENANT_EDGE_TENANCY_DEV_HOSTS: Extra hosts always treated as stateful
        TENANT_EDGE_TENANCY_REQUIRE_CONSISTENT_FRONTEND_DOMAIN: Cross-check
            X-Frontend-Domain against Origin/Referer (default: false)
        TENANT_EDGE_TENANCY_ASSET_BASE_URL: Base URL for branding assets
        TENANT_EDGE_TENANCY_SANITIZE_CUSTOM_CODE: Sanitize custom CSS and drop
            custom JS in branding payloads (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANT_EDGE_TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    registry_cache_ttl_seconds: int = Field(
        default=300,
        description="How long the full hostname list is cached",
        ge=0,
    )
    dev_hosts: list[str] = Field(
        default=[
            "localhost:3000",
            "127.0.0.1:3000",
            "localhost:3001",
            "127.0.0.1:3001",
        ],
        description="Development hosts added to the stateful host list",
    )
    require_consistent_frontend_domain: bool = Field(
        default=False,
        description="Ignore X-Frontend-Domain when it disagrees with Origin/Referer",
    )
    asset_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL used to build absolute branding asset URLs",
    )
    sanitize_custom_code: bool = Field(
        default=False,
        description="Sanitize custom CSS and drop custom JS from branding",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="TENANT_EDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Tenant Edge API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def session(self) -> SessionSettings:
        """Get session settings."""
        return get_session_settings()

    @property
    def cors(self) -> CorsSettings:
        """Get CORS settings."""
        return get_cors_settings()

    @property
    def tenancy(self) -> TenancySettings:
        """Get tenancy settings."""
        return get_tenancy_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_session_settings() -> SessionSettings:
    """Get cached session settings."""
    return SessionSettings()


@lru_cache
def get_cors_settings() -> CorsSettings:
    """Get cached CORS settings."""
    return CorsSettings()


@lru_cache
def get_tenancy_settings() -> TenancySettings:
    """Get cached tenancy settings."""
    return TenancySettings()
