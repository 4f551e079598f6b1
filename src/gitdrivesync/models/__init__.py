"""Public model exports for gitdrivesync."""

from __future__ import annotations

from .hierarchy import DriveHierarchy, FileEntry, FolderEntry, RemoteRef
from .remote import BAD_LINK, FINGERPRINT_PROPERTY, NO_HASH, RemoteFile, RemoteFolder
from .results import (
    OperationResult,
    OperationStatus,
    SyncResult,
    SyncStatus,
    summarize_results,
)
from .tracked_file import FileTag, TrackedFile

__all__ = [
    "DriveHierarchy",
    "FolderEntry",
    "FileEntry",
    "RemoteRef",
    "FileTag",
    "TrackedFile",
    "RemoteFolder",
    "RemoteFile",
    "FINGERPRINT_PROPERTY",
    "NO_HASH",
    "BAD_LINK",
    "OperationStatus",
    "SyncStatus",
    "OperationResult",
    "SyncResult",
    "summarize_results",
]
