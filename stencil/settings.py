"""
Stencil Settings - Configuration management using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StencilSettings(BaseSettings):
    """
    Stencil configuration settings.

    Settings are loaded from:
    1. Environment variables (highest priority)
    2. .env file in current directory
    3. Default values (lowest priority)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="STENCIL_",  # All Stencil env vars must start with STENCIL_
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR) (env: STENCIL_LOG_LEVEL)",
    )

    # Driver Configuration
    driver: str | None = Field(
        default=None,
        description="Driver factory as 'module:attribute' used by the CLI (env: STENCIL_DRIVER)",
    )

    dry_run: bool = Field(
        default=False,
        description="Run drivers in dry-run mode (env: STENCIL_DRY_RUN)",
    )


# Global settings instance
_settings: StencilSettings | None = None


def get_settings() -> StencilSettings:
    """
    Get the global settings instance.

    Creates the settings instance on first call, then returns cached instance.

    Returns:
        StencilSettings instance
    """
    global _settings
    if _settings is None:
        _settings = StencilSettings()
    return _settings


def reload_settings() -> StencilSettings:
    """
    Reload settings from environment/files.

    Useful for testing or when .env file changes.

    Returns:
        Fresh StencilSettings instance
    """
    global _settings
    _settings = StencilSettings()
    return _settings
