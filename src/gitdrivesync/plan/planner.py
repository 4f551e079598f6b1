"""Reconciliation of tracked files against the remote inventory."""

from __future__ import annotations

from typing import Iterable, Optional

from gitdrivesync.inventory import RemoteInventory
from gitdrivesync.models import RemoteFile, TrackedFile
from gitdrivesync.runlog import RunLog

from .actions import OperationKind
from .operation import SyncOperation


def plan_operations(
    tracked_files: Iterable[TrackedFile],
    inventory: RemoteInventory,
    run_log: Optional[RunLog] = None,
) -> list[SyncOperation]:
    """
    Compute the operations that bring the Drive root in line with the source.

    Rules:
        - Deletion pass first: every remote file whose path has no tracked
          file, or whose tracked file is DELETED, gets a DELETE.
        - Then, for every tracked file not DELETED: UPDATE when the remote
          file at the same path carries another fingerprint, CREATE when
          there is none, nothing when fingerprints are equal.
        - Within each pass, input order is kept.

    All deletes precede creates/updates so that a delete can never hit a file
    that has just been re-created at the same path.
    """
    tracked = list(tracked_files)
    tracked_by_path: dict[str, TrackedFile] = {}
    for tf in tracked:
        tracked_by_path.setdefault(tf.relative_path, tf)

    remote_by_path: dict[str, RemoteFile] = {}
    for rf in inventory.files:
        remote_by_path.setdefault(rf.full_path, rf)

    operations: list[SyncOperation] = []

    for rf in inventory.files:
        tf = tracked_by_path.get(rf.full_path)
        if tf is not None and not tf.is_deleted:
            continue
        operations.append(
            SyncOperation(seq=len(operations), kind=OperationKind.DELETE, tracked=tf, remote=rf)
        )
        _debug(
            run_log,
            f"File deleted [{rf.fingerprint or 'no hash info'}]=>"
            f"[{tf.tag.value if tf else 'not-found'}:{tf.fingerprint if tf else 'no hash'}]: "
            f"[{rf.full_path}]",
        )

    for tf in tracked:
        if tf.is_deleted:
            continue
        rf = remote_by_path.get(tf.relative_path)
        if rf is None:
            operations.append(SyncOperation(seq=len(operations), kind=OperationKind.CREATE, tracked=tf))
            _debug(run_log, f"File created []=>[{tf.tag.value}:{tf.fingerprint}]: [{tf.relative_path}]")
            continue

        if rf.fingerprint == tf.fingerprint:
            _debug(
                run_log,
                f"File up-to-date [{rf.fingerprint}]=>[{tf.tag.value}:{tf.fingerprint}], "
                f"skipping: [{tf.relative_path}]",
            )
            continue

        operations.append(
            SyncOperation(seq=len(operations), kind=OperationKind.UPDATE, tracked=tf, remote=rf)
        )
        _debug(
            run_log,
            f"File changed [{rf.fingerprint or 'no hash info'}]=>"
            f"[{tf.tag.value}:{tf.fingerprint}]: [{tf.relative_path}]",
        )

    return operations


def _debug(run_log: Optional[RunLog], message: str) -> None:
    if run_log is not None:
        run_log.debug(message)
