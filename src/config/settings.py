"""
Centralized settings management using pydantic-settings.

All environment variables and configuration values are defined here.
Use get_settings() to access the singleton settings instance.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    No variable is required; the service runs against the generated
    catalog with the local text fallbacks when nothing is configured.

    Optional environment variables:
        - HOST / PORT: Server bind address (default: 0.0.0.0:8080)
        - ENVIRONMENT: Environment name (development, staging, production)
        - CATALOG_PATH: JSON catalog to load instead of generating one
        - CATALOG_TTL_SECONDS: Catalog snapshot lifetime (default: 300)
        - OPENAI_API_KEY: Enables the assistant text collaborator
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    # CORS Configuration
    cors_origins: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        description="Allowed CORS origins"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    # ==========================================================================
    # Catalog
    # ==========================================================================
    catalog_ttl_seconds: float = Field(
        default=300.0,
        description="Seconds before the in-memory catalog snapshot is rebuilt"
    )
    catalog_path: Optional[Path] = Field(
        default=None,
        description="Optional JSON catalog file; generated catalog is used when unset or unreadable"
    )

    @field_validator("catalog_path", mode="before")
    @classmethod
    def parse_catalog_path(cls, v):
        if isinstance(v, str):
            return Path(v) if v.strip() else None
        return v

    # ==========================================================================
    # Search
    # ==========================================================================
    search_default_limit: int = Field(
        default=24,
        description="Number of ranked results returned by a search"
    )
    search_candidate_limit: int = Field(
        default=100,
        description="Candidate pool size used for scenario detection and bundles"
    )
    price_tie_threshold: float = Field(
        default=5.0,
        description="Score gap under which price ordering may reorder results"
    )

    # ==========================================================================
    # Bundles
    # ==========================================================================
    tier_uniform_range_threshold: int = Field(
        default=30,
        description="Price range below which tiers are cut by rank thirds instead of price bands"
    )

    # ==========================================================================
    # OpenAI (Assistant text collaborator)
    # ==========================================================================
    openai_api_key: str = Field(default="", description="OpenAI API key for assistant text")
    assistant_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model for reasons, verdicts and constraint deltas"
    )
    assistant_enabled: bool = Field(
        default=True,
        description="Enable the assistant collaborator (local fallbacks are used otherwise)"
    )
    assistant_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout for a single assistant call (seconds)"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses lru_cache to ensure only one instance is created.
    Settings are loaded from environment variables and .env file.

    Returns:
        Settings: The application settings instance
    """
    # Try to find .env file in project root
    env_file = Path(__file__).parent.parent.parent / ".env"
    if env_file.exists():
        os.environ.setdefault("ENV_FILE", str(env_file))

    return Settings(_env_file=env_file if env_file.exists() else None)


def get_settings_for_testing(**overrides) -> Settings:
    """
    Create a settings instance for testing with optional overrides.

    This bypasses the cache to allow different settings in tests.
    The assistant is disabled unless a test turns it back on.

    Args:
        **overrides: Setting values to override

    Returns:
        Settings: A new settings instance with overrides applied
    """
    test_defaults = {
        "environment": "testing",
        "debug": True,
        "openai_api_key": "",
        "assistant_enabled": False,
    }
    test_defaults.update(overrides)

    return Settings(_env_file=None, **test_defaults)
