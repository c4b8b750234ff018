# =============================================================================
# app/config.py - Client Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.NEXO_API_BASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Nothing here is required - every value has a default that points at the
# production backend, so the client starts without a .env file.
# =============================================================================

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Client settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Backend
    # -------------------------------------------------------------------------

    NEXO_API_BASE_URL: str = Field(
        default="https://apinest-production.up.railway.app",
        description="Backend base URL (no trailing slash)"
    )

    # The production backend mounts the swipe endpoints under /quick-match
    NEXO_QUICK_MATCH_PREFIX: str = Field(
        default="",
        description="Path prefix for profiles/like/pass/matches endpoints"
    )

    HTTP_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Per-request timeout for backend calls"
    )

    # -------------------------------------------------------------------------
    # Quick Match (swipe session)
    # -------------------------------------------------------------------------

    QUICK_MATCH_PAGE_SIZE: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Number of candidate profiles requested per page"
    )

    SWIPE_ADVANCE_DELAY_SECONDS: float = Field(
        default=0.05,
        ge=0,
        le=5,
        description="Delay before the cursor moves past a swiped profile"
    )

    MATCH_DISPLAY_SECONDS: float = Field(
        default=2.5,
        ge=0,
        le=30,
        description="How long a mutual match stays in pending_match"
    )

    PREFETCH_THRESHOLD: int = Field(
        default=2,
        ge=0,
        le=50,
        description="Load the next page when this close to the end of the queue"
    )

    # -------------------------------------------------------------------------
    # Placeholder images
    # -------------------------------------------------------------------------
    # Both templates are formatted with the profile id so the same profile
    # always renders the same placeholder.

    AVATAR_PLACEHOLDER_URL: str = Field(
        default="https://i.pravatar.cc/400?u={id}",
        description="Avatar used when a profile carries no image at all"
    )

    COVER_PLACEHOLDER_URL: str = Field(
        default="https://picsum.photos/seed/{id}/800/600",
        description="Cover image used when a profile carries no image at all"
    )

    # -------------------------------------------------------------------------
    # Token persistence
    # -------------------------------------------------------------------------

    TOKEN_STORE_PATH: Path = Field(
        default=Path.home() / ".config" / "nexo" / "token.json",
        description="File used by FileTokenStore to persist the access token"
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
        description="Enable debug mode (request/response tracing)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in project root
        env_file=".env",
        env_file_encoding="utf-8",
        # Empty env values fall back to defaults
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
        # .env may also hold unrelated keys
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def api_base_url(self) -> str:
        """Base URL with any trailing slash removed."""
        return self.NEXO_API_BASE_URL.rstrip("/")

    @property
    def quick_match_prefix(self) -> str:
        """
        Normalize the quick-match prefix to "" or "/segment".

        Example: "quick-match/" -> "/quick-match"
        """
        prefix = self.NEXO_QUICK_MATCH_PREFIX.strip().strip("/")
        return f"/{prefix}" if prefix else ""

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

    Returns:
        Settings: The client settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
