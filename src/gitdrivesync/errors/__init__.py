"""Public error exports for gitdrivesync."""

from __future__ import annotations

from .exceptions import (
    AuthError,
    ConfigurationError,
    CreationError,
    DeletionError,
    ExecutorInvariantError,
    HttpErrorInfo,
    LocalFileError,
    NetworkError,
    NotFoundError,
    NotificationError,
    ParseError,
    PermissionDeniedError,
    RateLimitError,
    RemoteApiError,
    RetrievalError,
    SyncError,
    UpdateError,
    map_http_error,
)

__all__ = [
    "SyncError",
    "ConfigurationError",
    "AuthError",
    "ParseError",
    "RetrievalError",
    "CreationError",
    "UpdateError",
    "DeletionError",
    "LocalFileError",
    "NotificationError",
    "ExecutorInvariantError",
    "RemoteApiError",
    "PermissionDeniedError",
    "NotFoundError",
    "RateLimitError",
    "NetworkError",
    "HttpErrorInfo",
    "map_http_error",
]
