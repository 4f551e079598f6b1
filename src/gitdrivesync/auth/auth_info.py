"""Authentication information for gitdrivesync."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

SUPPORTED_KINDS: tuple[str, ...] = ("service_account", "oauth")


@dataclass(slots=True, frozen=True)
class AuthInfo:
    """
    Authentication information.

    kind = "service_account" (default for unattended runs):
        data must include:
            - key: service account JSON key, either the JSON text itself or
              a path to a file containing it
        data may include:
            - subject: account to impersonate (domain-wide delegation)

    kind = "oauth":
        data must include:
            - client_secrets_file
            - token_file: authorized-user token, refreshed and rewritten
              in place; unattended runs need one that already exists
    """

    kind: str
    data: dict[str, Any] = field(repr=False)

    def __post_init__(self) -> None:
        if self.kind not in SUPPORTED_KINDS:
            raise ValueError(f"AuthInfo.kind must be one of {SUPPORTED_KINDS}")

        if not isinstance(self.data, dict):
            raise TypeError("AuthInfo.data must be a dict")

        required = ("key",) if self.kind == "service_account" else ("client_secrets_file", "token_file")
        for key in required:
            value = self.data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"AuthInfo.data['{key}'] must be a non-empty string")

    @classmethod
    def service_account(cls, key: str, subject: Optional[str] = None) -> AuthInfo:
        data: dict[str, Any] = {"key": key}
        if subject:
            data["subject"] = subject
        return cls(kind="service_account", data=data)

    @classmethod
    def oauth(cls, client_secrets_file: str, token_file: str) -> AuthInfo:
        return cls(
            kind="oauth",
            data={"client_secrets_file": client_secrets_file, "token_file": token_file},
        )

    @property
    def key(self) -> str:
        """Service account key (JSON text or file path)."""
        return str(self.data["key"])

    @property
    def subject(self) -> Optional[str]:
        value = self.data.get("subject")
        return str(value) if value else None

    @property
    def client_secrets_file(self) -> str:
        """Path to OAuth client secrets JSON."""
        return str(self.data["client_secrets_file"])

    @property
    def token_file(self) -> str:
        """Path to OAuth token JSON (authorized user)."""
        return str(self.data["token_file"])
