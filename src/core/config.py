"""Application configuration management using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Required settings will raise validation errors if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="thikabizhub-backend", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")
    max_request_body_size: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted request body size in bytes",
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins",
    )

    # Supabase
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_secret_key: str = Field(..., description="Supabase secret key for backend operations")
    supabase_signing_key_jwk: str = Field(..., description="Supabase signing key JWK (JSON string) for JWT token verification")
    supabase_jwt_audience: str = Field(default="authenticated", description="Expected audience claim on access tokens")
    proofs_bucket: str = Field(default="proofs", description="Storage bucket for proof-of-visit images")

    # Cache
    cache_cleanup_interval_seconds: int = Field(default=300, description="Seconds between expired cache entry sweeps")
    businesses_cache_ttl: int = Field(default=300, description="TTL for cached business listings (seconds)")
    analytics_cache_ttl: int = Field(default=600, description="TTL for cached dashboard analytics (seconds)")
    count_cache_ttl: int = Field(default=300, description="TTL for cached collection counts (seconds)")

    # Pagination
    default_page_size: int = Field(default=10, description="Page size when none is requested")
    max_page_size: int = Field(default=100, description="Largest page size a caller may request")

    # Invites and referrals
    invite_expiry_days: int = Field(default=7, description="Days until an invite expires")
    referral_reward_amount: int = Field(default=10, description="Reward credited per completed referral")

    # Email (Resend)
    resend_api_key: str = Field(default="", description="Resend API key for sending emails")
    email_from_address: str = Field(
        default="ThikaBizHub <noreply@thikabizhub.com>",
        description="From address for transactional emails",
    )

    # Frontend
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Frontend application URL for invite links",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def email_enabled(self) -> bool:
        """Check if transactional email is configured."""
        return bool(self.resend_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings: Application settings instance.

    Note:
        Settings are cached using lru_cache for performance.
        Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
