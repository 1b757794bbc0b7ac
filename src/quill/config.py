"""Configuration management for Quill."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging_utils import LogProfile, configure_logging


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="QUILL_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    home: Path = Field(default=Path.home() / ".quill", description="Directory holding Quill state")
    workspaces_file: Optional[Path] = Field(None, description="YAML catalogue of workspace ids and paths")

    # External assistant
    assistant_command: str = Field(default="claude", description="Executable of the external assistant")
    assistant_timeout_seconds: float = Field(default=120.0, description="Upper bound for one assistant call")

    # Mention indexing
    index_ttl_seconds: float = Field(default=10.0, description="Time-to-live of per-workspace mention indexes")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")

    def resolve_home(self) -> Path:
        home = self.home.expanduser()
        return home.resolve()

    def resolve_workspaces_file(self) -> Path:
        if self.workspaces_file is not None:
            return self.workspaces_file.expanduser()
        return self.resolve_home() / "workspaces.yaml"


def get_settings(*, profile: LogProfile = "default", **overrides: object) -> Settings:
    """Get application settings.

    Args:
        profile: Logging profile to configure.
        overrides: Explicit field values taking precedence over the environment.

    Returns:
        Settings instance
    """
    settings = Settings(**overrides)

    configure_logging(profile=profile, level=settings.log_level)

    return settings
