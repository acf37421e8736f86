"""Configuration settings for hackeros_builder.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_work_dir() -> Path:
    """Return the default build working directory."""
    return Path.home() / ".cache" / "hackeros-builder" / "build"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the HACKEROS_BUILD_
    prefix. CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="HACKEROS_BUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    work_dir: Path = Field(
        default_factory=_default_work_dir,
        description="Build directory used when --here is not given",
    )
    os_release_path: Path = Field(
        default=Path("/etc/os-release"),
        description="Host OS identification file",
    )
    branding_path: Path = Field(
        default=Path("/etc/hackeros-release"),
        description="Host branding file carrying the Variant key",
    )

    # live-build
    lb_command: str = Field(
        default="lb",
        description="live-build executable",
    )
    architecture: str = Field(
        default="amd64",
        description="Target architecture passed to lb config",
    )
    artifact_name: str = Field(
        default="live-image-amd64.hybrid.iso",
        description="Image file name produced by lb build",
    )

    # Operational modes
    interactive: bool = Field(
        default=True,
        description="Prompt for artifact rename/destination after a build",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Timeouts (in seconds)
    command_timeout: int | None = Field(
        default=None,
        ge=60,
        description="Timeout for each lb invocation (unset = wait forever)",
    )


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
