"""Result models for a sync run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional


OperationStatus = Literal["success", "failed", "skipped"]
SyncStatus = Literal["success", "failed"]


@dataclass(slots=True)
class OperationResult:
    """Result for a single SyncOperation."""

    seq: int
    kind: str
    path: str
    status: OperationStatus

    error_type: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[dict[str, Any]] = None

    remote_id: Optional[str] = None


@dataclass(slots=True)
class SyncResult:
    """
    Aggregate result of applying a batch of operations.

    status is "failed" only when a setup step failed; per-operation failures
    are counted in summary but leave status at "success".
    """

    status: SyncStatus
    results: list[OperationResult] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)
    folders_deleted: list[str] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 0 if self.status == "success" else 1


def summarize_results(results: list[OperationResult]) -> dict[str, int]:
    summary: dict[str, int] = {"success": 0, "failed": 0, "skipped": 0}
    for r in results:
        summary[r.status] = summary.get(r.status, 0) + 1
    return summary
