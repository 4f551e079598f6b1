"""Credential loading and authorization for gitdrivesync."""

from __future__ import annotations

import json
import os
from typing import Any, Sequence

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from gitdrivesync.errors import AuthError, ConfigurationError

from .auth_info import AuthInfo

DRIVE_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/drive",)


class CredentialProvider:
    """
    Turn AuthInfo into authorized Google credentials.

    authorize() is the only capability the rest of the package needs: it
    returns a credentials handle the Drive controller can use. Error messages
    never include key material or key file paths.
    """

    def __init__(self, auth_info: AuthInfo, *, interactive: bool = False) -> None:
        self._auth_info = auth_info
        # Only an interactive caller may fall back to the browser consent flow.
        self._interactive = interactive

    def authorize(self, scopes: Sequence[str] = DRIVE_SCOPES, ensure_valid: bool = True) -> Any:
        """
        Return credentials for the given scopes.

        Args:
            scopes: OAuth scopes.
            ensure_valid: If True, fetch/refresh an access token now so that
                bad credentials fail before any sync work starts.

        Raises:
            AuthError: on parse/load/refresh/flow failures.
            ConfigurationError: if scopes is invalid.
        """
        if not scopes or not all(isinstance(s, str) and s.strip() for s in scopes):
            raise ConfigurationError("scopes must be a non-empty sequence of strings")

        if self._auth_info.kind == "service_account":
            creds = self._service_account_credentials(list(scopes))
            if ensure_valid:
                self._refresh(creds, "Failed to authorize Google Drive credentials")
            return creds

        return self._oauth_credentials(list(scopes), ensure_valid)

    # ----------------------------
    # Service account
    # ----------------------------
    def _service_account_credentials(self, scopes: list[str]) -> Any:
        info = self._load_key_info()
        try:
            creds = service_account.Credentials.from_service_account_info(info, scopes=scopes)
        except (ValueError, KeyError):
            raise AuthError("Unable to parse the provided Google Drive credentials") from None

        if self._auth_info.subject:
            creds = creds.with_subject(self._auth_info.subject)
        return creds

    def _load_key_info(self) -> dict[str, Any]:
        source = self._auth_info.key
        # The key is either the JSON document itself or a file holding it.
        try:
            info = json.loads(source)
        except ValueError:
            try:
                with open(source, "r", encoding="utf-8") as f:
                    info = json.load(f)
            except (OSError, ValueError):
                raise AuthError(
                    "Unable to parse or read the provided Google Drive credentials"
                ) from None

        if not isinstance(info, dict):
            raise AuthError("Unable to parse the provided Google Drive credentials")
        return info

    # ----------------------------
    # OAuth (installed app)
    # ----------------------------
    def _oauth_credentials(self, scopes: list[str], ensure_valid: bool) -> Any:
        token_file = self._auth_info.token_file
        creds = None

        if os.path.exists(token_file):
            try:
                creds = Credentials.from_authorized_user_file(token_file, scopes=scopes)
            except (ValueError, OSError) as exc:
                raise AuthError("Failed to load OAuth token file") from exc

            if not ensure_valid:
                return creds

            if not creds.valid and creds.refresh_token:
                self._refresh(creds, "Failed to refresh OAuth credentials")
                self._save_credentials(creds)

            if creds.valid:
                return creds

        if not self._interactive:
            raise AuthError("OAuth token file is missing or no longer valid")

        # No token, or token could not be validated/refreshed -> run OAuth flow.
        try:
            flow = InstalledAppFlow.from_client_secrets_file(
                self._auth_info.client_secrets_file,
                scopes=scopes,
            )
            creds = flow.run_local_server(port=0)
        except (ValueError, OSError, GoogleAuthError) as exc:
            raise AuthError("OAuth authorization flow failed") from exc
        self._save_credentials(creds)
        return creds

    def _save_credentials(self, creds: Any) -> None:
        token_file = self._auth_info.token_file
        token_dir = os.path.dirname(token_file)
        try:
            if token_dir:
                os.makedirs(token_dir, exist_ok=True)
            with open(token_file, "w", encoding="utf-8") as f:
                f.write(creds.to_json())
        except OSError as exc:
            raise AuthError("Failed to save OAuth token file") from exc

    @staticmethod
    def _refresh(creds: Any, message: str) -> None:
        try:
            creds.refresh(Request())
        except GoogleAuthError as exc:
            raise AuthError(message, details={"error": type(exc).__name__}) from exc
