"""Public auth exports for gitdrivesync."""

from __future__ import annotations

from .auth_info import SUPPORTED_KINDS, AuthInfo
from .credentials import DRIVE_SCOPES, CredentialProvider

__all__ = ["AuthInfo", "CredentialProvider", "DRIVE_SCOPES", "SUPPORTED_KINDS"]
