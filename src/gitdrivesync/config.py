"""Run configuration loaded from environment variables."""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gitdrivesync.errors import ConfigurationError

_REQUIRED: tuple[tuple[str, str], ...] = (
    ("google_key", "GOOGLE_KEY"),
    ("gdrive_folderid", "GDRIVE_FOLDERID"),
    ("git_origin", "GIT_ORIGIN"),
)


class Settings(BaseSettings):
    """gitdrivesync settings (environment first, then `.env`)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Google Drive
    google_key: Optional[str] = None
    google_subject: Optional[str] = None
    google_oauth_client_secrets: Optional[str] = None
    google_oauth_token: Optional[str] = None
    google_oauth_interactive: bool = False
    gdrive_folderid: Optional[str] = None

    # Git
    git_root: Optional[str] = None
    git_subdir: str = ""
    git_origin: Optional[str] = None
    git_since: Optional[str] = None
    git_glob: Optional[str] = None
    git_glob_implicit_base: bool = True

    # Slack
    slack_channels: Optional[str] = None
    slack_max_chars: int = Field(default=30000, ge=1)

    # Run
    dry_run: bool = False
    max_concurrency: int = Field(default=20, ge=1, le=100)

    @field_validator(
        "google_key",
        "google_subject",
        "google_oauth_client_secrets",
        "google_oauth_token",
        "gdrive_folderid",
        "git_root",
        "git_origin",
        "git_since",
        "git_glob",
        "slack_channels",
        mode="before",
    )
    @classmethod
    def _blank_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def uses_oauth(self) -> bool:
        """True when no service account key is set and an OAuth token file is."""
        return not self.google_key and bool(self.google_oauth_token)

    def require(self) -> None:
        """
        GOOGLE_KEY may be replaced by GOOGLE_OAUTH_CLIENT_SECRETS together
        with GOOGLE_OAUTH_TOKEN.

        Raises:
            ConfigurationError: naming every missing required variable.
        """
        missing = [env for attr, env in _REQUIRED if not getattr(self, attr)]
        if self.uses_oauth:
            missing.remove("GOOGLE_KEY")
            if not self.google_oauth_client_secrets:
                missing.insert(0, "GOOGLE_OAUTH_CLIENT_SECRETS")
        if missing:
            raise ConfigurationError(
                "Missing required environment variable(s): " + ", ".join(missing),
                details={"missing": missing},
            )
