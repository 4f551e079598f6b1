"""gitdrivesync public API."""

from __future__ import annotations

from gitdrivesync.auth import AuthInfo, CredentialProvider
from gitdrivesync.config import Settings
from gitdrivesync.errors import (
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
from gitdrivesync.executor import BoundedExecutor
from gitdrivesync.inventory import FolderMaterializer, RemoteInventory
from gitdrivesync.manager import DriveSyncManager, sync_repository
from gitdrivesync.models import (
    FileTag,
    OperationResult,
    RemoteFile,
    RemoteFolder,
    SyncResult,
    TrackedFile,
)
from gitdrivesync.notify import NotificationAggregator, SlackConfig, SlackWebhookChannel
from gitdrivesync.plan import OperationKind, SyncOperation, plan_operations
from gitdrivesync.runlog import RunLog
from gitdrivesync.source import GitSourceEnumerator, PathMatcher

__all__ = [
    # High-level
    "DriveSyncManager",
    "sync_repository",
    "Settings",
    "RunLog",
    # Auth
    "AuthInfo",
    "CredentialProvider",
    # Source
    "PathMatcher",
    "GitSourceEnumerator",
    # Remote state
    "RemoteInventory",
    "FolderMaterializer",
    # Plan / Execution
    "OperationKind",
    "SyncOperation",
    "plan_operations",
    "BoundedExecutor",
    # Notifications
    "NotificationAggregator",
    "SlackConfig",
    "SlackWebhookChannel",
    # Models
    "FileTag",
    "TrackedFile",
    "RemoteFolder",
    "RemoteFile",
    "OperationResult",
    "SyncResult",
    # Errors
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
