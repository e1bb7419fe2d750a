# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# Recipe Book configuration: Supabase connection, Firebase token checks,
# session timeout and server options. Values come from the process
# environment first, then an optional .env file (see .env.example).
#
# Usage:
#   from app.config import settings
#   settings.SESSION_TIMEOUT_MINUTES  # -> 30
#
# Missing required values (Supabase URL/key, Firebase project id) fail at
# import time.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Environment-driven settings for the Recipe Book API.

    Import the module-level `settings` rather than instantiating this.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    DB_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout applied to every PostgREST call"
    )

    # -------------------------------------------------------------------------
    # Identity Provider (Firebase Authentication)
    # -------------------------------------------------------------------------

    FIREBASE_PROJECT_ID: str = Field(
        ...,
        description="Firebase project id; ID tokens must carry it as audience"
    )

    FIREBASE_JWKS_URL: str = Field(
        default="https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com",
        description="Public signing keys for Firebase ID tokens"
    )

    AUTH_JWT_SECRET: str | None = Field(
        default=None,
        min_length=16,
        description="Optional HS256 secret accepted in place of Firebase keys (local dev, tests)"
    )

    # -------------------------------------------------------------------------
    # Sessions & Recipes
    # -------------------------------------------------------------------------

    SESSION_TIMEOUT_MINUTES: int = Field(
        default=30,
        ge=1,
        le=1440,
        description="Idle timeout used when a user record doesn't set its own"
    )

    TOP_RECIPES_LIMIT: int = Field(
        default=6,
        ge=1,
        le=50,
        description="Default size of GET /api/recipes/top"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (production sets env vars directly)
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:5173, https://myapp.com" -> ["http://localhost:5173", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
