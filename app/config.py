# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Object storage roots are optional here; the object storage service
# checks them when it is constructed (see ObjectStorageConfigError).
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # Required - the guitar catalog lives in a Supabase table

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    GUITARS_TABLE: str = Field(
        default="guitars",
        description="Table holding guitar listings"
    )

    ACCESS_GROUP_MEMBERS_TABLE: str = Field(
        default="access_group_members",
        description="Table holding (group_id, user_id) rows for USER_LIST access groups"
    )

    # -------------------------------------------------------------------------
    # Object Storage Configuration (S3-compatible)
    # -------------------------------------------------------------------------

    OBJECT_STORAGE_ENDPOINT_URL: str | None = Field(
        default=None,
        description="S3-compatible endpoint (e.g., https://<ref>.supabase.co/storage/v1/s3)"
    )

    OBJECT_STORAGE_PUBLIC_URL: str | None = Field(
        default=None,
        description="Base URL of full object URLs given to clients (defaults to the endpoint)"
    )

    OBJECT_STORAGE_ACCESS_KEY_ID: str | None = Field(default=None)

    OBJECT_STORAGE_SECRET_ACCESS_KEY: str | None = Field(default=None)

    OBJECT_STORAGE_REGION: str = Field(
        default="auto",
        description="Region name used when signing requests"
    )

    PUBLIC_OBJECT_SEARCH_PATHS: str = Field(
        default="",
        description="Comma-separated /bucket/prefix roots searched for public objects"
    )

    PRIVATE_OBJECT_DIR: str = Field(
        default="",
        description="/bucket/prefix root for uploaded object entities"
    )

    CATALOG_OWNER_ID: str = Field(
        default="bond-st-guitars",
        description="Owner identity recorded in ACL policies of catalog images"
    )

    UPLOAD_URL_TTL_SECONDS: int = Field(
        default=900,
        ge=1,
        le=7 * 24 * 3600,
        description="Lifetime of signed upload URLs"
    )

    OBJECT_CACHE_TTL_SECONDS: int = Field(
        default=3600,
        ge=0,
        description="Cache-Control max-age for downloaded objects"
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
        description="Enable debug mode (verbose logging)"
    )

    API_HOST: str = Field(default="0.0.0.0")

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

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS string into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def public_object_search_paths_list(self) -> list[str]:
        """
        Parse PUBLIC_OBJECT_SEARCH_PATHS into a list.

        Blank entries are dropped and duplicates removed, keeping the
        first occurrence so search order follows the configuration.

        Example: "/bucket/public, /bucket/public,/other" -> ["/bucket/public", "/other"]
        """
        paths = [path.strip() for path in self.PUBLIC_OBJECT_SEARCH_PATHS.split(",")]
        return list(dict.fromkeys(path for path in paths if path))

    @property
    def object_storage_public_url(self) -> str | None:
        """Base URL that full client-facing object URLs start with."""
        base = self.OBJECT_STORAGE_PUBLIC_URL or self.OBJECT_STORAGE_ENDPOINT_URL
        return base.rstrip("/") if base else None

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
