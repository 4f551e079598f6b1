"""Sync operation kinds for gitdrivesync."""

from __future__ import annotations

from enum import Enum


class OperationKind(str, Enum):
    """Supported sync operations."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
