"""Data model for files tracked by the source tree."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from enum import Enum


class FileTag(str, Enum):
    """What the source tree says should happen to a tracked file."""

    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"


@dataclass(slots=True, frozen=True)
class TrackedFile:
    """
    A file as known to the source tree.

    Notes:
        - relative_path is relative to the sync subdirectory, '/'-separated,
          and unique within a run.
        - full_path is relative to the repository root (includes the
          subdirectory prefix).
    """

    relative_path: str
    full_path: str
    fingerprint: str
    tag: FileTag = FileTag.ADDED

    @property
    def name(self) -> str:
        return posixpath.basename(self.relative_path)

    @property
    def folder_path(self) -> str:
        """Directory part of relative_path ('' for top-level files)."""
        return posixpath.dirname(self.relative_path)

    @property
    def is_deleted(self) -> bool:
        return self.tag is FileTag.DELETED
