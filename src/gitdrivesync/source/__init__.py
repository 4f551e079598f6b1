"""Source-tree enumeration exports for gitdrivesync."""

from __future__ import annotations

from .git_source import (
    RESERVED_FOLDER,
    GitSourceEnumerator,
    SourceEnumerator,
    decode_tag,
    normalize_subdirectory,
)
from .matcher import PathMatcher

__all__ = [
    "PathMatcher",
    "SourceEnumerator",
    "GitSourceEnumerator",
    "RESERVED_FOLDER",
    "decode_tag",
    "normalize_subdirectory",
]
