"""Exception hierarchy and HTTP error mapping for gitdrivesync."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class SyncError(Exception):
    """
    Base exception for gitdrivesync.

    Attributes:
        details: Optional structured information (e.g., HTTP status, path).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class ConfigurationError(SyncError):
    """Raised when a required input is missing or malformed."""


class AuthError(SyncError):
    """Raised when credentials cannot be parsed or authorized."""


class ParseError(SyncError):
    """Raised when the source listing is internally inconsistent."""


class RetrievalError(SyncError):
    """Raised when the remote inventory cannot be fetched."""


class CreationError(SyncError):
    """Raised when a remote folder/file creation is not confirmed."""


class UpdateError(SyncError):
    """Raised when a remote file update is not confirmed."""


class DeletionError(SyncError):
    """Raised when a remote file/folder trash is not confirmed."""


class LocalFileError(SyncError):
    """Raised when a local file cannot be read for upload."""


class NotificationError(SyncError):
    """Raised when a notification batch cannot be delivered."""


class ExecutorInvariantError(SyncError):
    """Raised when the bounded executor's ticket queue is exhausted."""


class RemoteApiError(SyncError):
    """Raised for Drive API errors (5xx, unknown 4xx, etc.)."""


class PermissionDeniedError(RemoteApiError):
    """Raised when access is denied (HTTP 401/403 non-quota)."""


class NotFoundError(RemoteApiError):
    """Raised when a Drive resource is not found (HTTP 404)."""


class RateLimitError(RemoteApiError):
    """Raised when rate-limited (HTTP 429 or quota-related 403)."""


class NetworkError(RemoteApiError):
    """Raised when network/timeout issues prevent the request."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to gitdrivesync exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_QUOTA_REASON_KEYWORDS: tuple[str, ...] = (
    "quota",
    "rateLimitExceeded",
    "userRateLimitExceeded",
    "dailyLimitExceeded",
    "usageLimits",
)


def _is_quota_reason(reason: str | None) -> bool:
    if not reason:
        return False
    return any(key.lower() in reason.lower() for key in _QUOTA_REASON_KEYWORDS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> RemoteApiError:
    """
    Map an HTTP error to a RemoteApiError subclass.

    Policy:
        - 401 -> PermissionDeniedError
        - 403 -> RateLimitError if quota-related, else PermissionDeniedError
        - 404 -> NotFoundError
        - 429 -> RateLimitError
        - otherwise -> RemoteApiError (status kept in details for retry checks)
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 401:
        return PermissionDeniedError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_quota_reason(info.reason):
            return RateLimitError(message, details=details, cause=cause)
        return PermissionDeniedError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return RemoteApiError(message, details=details, cause=cause)
