"""Public plan exports for gitdrivesync."""

from __future__ import annotations

from .actions import OperationKind
from .operation import SyncOperation
from .planner import plan_operations

__all__ = [
    "OperationKind",
    "SyncOperation",
    "plan_operations",
]
