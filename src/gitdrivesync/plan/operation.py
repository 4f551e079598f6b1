"""Sync operation model (explicit fields per kind)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from gitdrivesync.models import RemoteFile, TrackedFile

from .actions import OperationKind


@dataclass(slots=True)
class SyncOperation:
    """
    A single planned operation.

    Field usage by kind:
        - CREATE: tracked
        - UPDATE: tracked, remote
        - DELETE: remote, and tracked when the source tree still lists it
    """

    seq: int
    kind: OperationKind
    tracked: Optional[TrackedFile] = None
    remote: Optional[RemoteFile] = None

    @property
    def path(self) -> str:
        if self.remote is not None:
            return self.remote.full_path
        if self.tracked is not None:
            return self.tracked.relative_path
        return ""

    def validate_required_fields(self) -> None:
        """Validate required fields according to kind. Raises ValueError."""
        if self.kind is OperationKind.CREATE:
            _require(self.tracked, "tracked")
            return

        if self.kind is OperationKind.UPDATE:
            _require(self.tracked, "tracked")
            _require(self.remote, "remote")
            return

        if self.kind is OperationKind.DELETE:
            _require(self.remote, "remote")
            return

        raise ValueError(f"Unsupported operation kind: {self.kind}")


def _require(value: object, field_name: str) -> None:
    if value is None:
        raise ValueError(f"Missing required field: {field_name}")
