"""DriveSyncManager: applies planned operations to Drive and runs the whole pass."""

from __future__ import annotations

import asyncio
import os
import posixpath
from functools import partial
from typing import TYPE_CHECKING, Any, Iterable, Optional, Sequence

from gitdrivesync.auth import AuthInfo, CredentialProvider
from gitdrivesync.controller import GoogleDriveController
from gitdrivesync.errors import (
    CreationError,
    DeletionError,
    ExecutorInvariantError,
    SyncError,
    UpdateError,
)
from gitdrivesync.executor import DEFAULT_LIMIT, BoundedExecutor
from gitdrivesync.inventory import FolderMaterializer, RemoteInventory, build_inventory
from gitdrivesync.models import (
    FINGERPRINT_PROPERTY,
    NO_HASH,
    OperationResult,
    RemoteFile,
    RemoteFolder,
    SyncResult,
    TrackedFile,
    summarize_results,
)
from gitdrivesync.notify import NotificationAggregator, NotificationChannel, SlackConfig
from gitdrivesync.plan import OperationKind, SyncOperation, plan_operations
from gitdrivesync.runlog import RunLog
from gitdrivesync.source import GitSourceEnumerator, PathMatcher, SourceEnumerator
from gitdrivesync.util.aio import run_sync

if TYPE_CHECKING:
    from gitdrivesync.config import Settings

APP_NAME = "Github2Drive"

FLUSH_INTERVAL_SEC: float = 0.5


class DriveSyncManager:
    """
    Apply create/update/delete operations against one Drive root.

    The manager owns the run's mutable state: the remote inventory and the
    list of tracked files (which shrinks as tracked deletions complete).
    Operation bodies run on the event loop; only Drive calls leave it.
    """

    def __init__(
        self,
        controller: Any,
        inventory: RemoteInventory,
        tracked_files: Iterable[TrackedFile],
        *,
        run_log: Optional[RunLog] = None,
        git_root: Optional[str] = None,
        channels: Sequence[NotificationChannel] = (),
        aggregator: Optional[NotificationAggregator] = None,
        dry_run: bool = False,
        max_concurrency: int = DEFAULT_LIMIT,
        flush_interval_sec: float = FLUSH_INTERVAL_SEC,
    ) -> None:
        self._controller = controller
        self._inventory = inventory
        self._tracked: list[TrackedFile] = list(tracked_files)
        self._log = run_log if run_log is not None else RunLog()
        self._git_root = git_root
        self._channels = list(channels)
        self._aggregator = aggregator if aggregator is not None else NotificationAggregator()
        self._dry_run = dry_run
        self._flush_interval_sec = flush_interval_sec
        self._executor = BoundedExecutor(max_concurrency, self._log)
        self._materializer = FolderMaterializer(controller, inventory, self._log)
        self._folders_deleted: list[str] = []
        self._folders_deleting: set[str] = set()

    @property
    def inventory(self) -> RemoteInventory:
        return self._inventory

    @property
    def tracked_files(self) -> list[TrackedFile]:
        return list(self._tracked)

    @property
    def run_log(self) -> RunLog:
        return self._log

    def plan(self) -> list[SyncOperation]:
        """Plan operations for the current tracked files and inventory."""
        return plan_operations(self._tracked, self._inventory, self._log)

    async def apply(self, operations: Sequence[SyncOperation]) -> SyncResult:
        """
        Apply operations through the bounded executor.

        Policy:
            - Submission follows the given order (deletes first, as planned).
            - A failing operation is logged and recorded; the batch continues.
            - An ExecutorInvariantError marks the whole result as failed.
            - Notices are flushed while work is in flight and once at the end.
        """
        for op in operations:
            op.validate_required_fields()

        if self._dry_run:
            results = [self._dry_run_result(op) for op in operations]
            await self.flush_notices()
            return SyncResult(status="success", results=results, summary=summarize_results(results))

        for op in operations:
            self._executor.submit(f"{op.kind.value} {op.path}", partial(self.execute_operation, op))

        stop_flushing = asyncio.Event()
        flusher = asyncio.create_task(self._flush_periodically(stop_flushing))
        try:
            outcomes = await self._executor.wait_all()
        finally:
            stop_flushing.set()
            await flusher

        status = "success"
        results: list[OperationResult] = []
        for op, outcome in zip(operations, outcomes):
            if isinstance(outcome, ExecutorInvariantError):
                # Admission itself broke; the run as a whole can't be trusted.
                self._log.error(f"Executor invariant broken ({op.kind.value} {op.path}): {outcome}")
                status = "failed"
                results.append(_failed_result(op, outcome))
            elif isinstance(outcome, BaseException):
                self._log.error(f"executeAction error ({op.kind.value} {op.path}): {outcome!r}")
                results.append(_failed_result(op, outcome))
            else:
                results.append(outcome)

        await self.flush_notices()
        return SyncResult(
            status=status,
            results=results,
            summary=summarize_results(results),
            folders_deleted=list(self._folders_deleted),
        )

    async def execute_operation(self, op: SyncOperation) -> OperationResult:
        """Run one operation; SyncError is logged and turned into a failed result."""
        try:
            if op.kind is OperationKind.CREATE:
                created = await self.create_file(op.tracked)  # type: ignore[arg-type]
                return _success_result(op, created.id)
            if op.kind is OperationKind.UPDATE:
                updated = await self.update_file(op.remote, op.tracked)  # type: ignore[arg-type]
                return _success_result(op, updated.id)
            if op.kind is OperationKind.DELETE:
                deleted = await self.delete_file(op.remote, op.tracked)  # type: ignore[arg-type]
                return _success_result(op, deleted.id)
        except SyncError as exc:
            self._log.error(
                f"Unable to {op.kind.value.lower()} file in drive:\n    {op.path}\n    {exc}"
            )
            return _failed_result(op, exc)

        raise ValueError(f"Unsupported operation kind: {op.kind}")

    # ----------------------------
    # File operations
    # ----------------------------
    async def create_file(self, tracked: TrackedFile) -> RemoteFile:
        """
        Upload a tracked file into its folder (created on demand).

        Raises:
            CreationError: if the folder or file creation is not confirmed.
        """
        folder = await self._materializer.ensure_folder(tracked.folder_path)
        description = f"Created by {APP_NAME} upon hash {tracked.fingerprint}"
        properties = {FINGERPRINT_PROPERTY: tracked.fingerprint}

        ref = await run_sync(
            self._controller.create_file,
            self.local_path(tracked),
            folder.id,
            name=tracked.name,
            description=description,
            properties=properties,
        )
        if not ref.id:
            raise CreationError(
                "Drive file created but no ID returned",
                details={"path": tracked.relative_path},
            )

        remote = RemoteFile(
            id=ref.id,
            name=tracked.name,
            folder=folder,
            description=description,
            properties=properties,
        )
        if ref.web_view_link:
            remote.web_view_link = ref.web_view_link
        self._inventory.add_file(remote)

        self._log.debug(f"Created file on drive: [{remote.full_path}]")
        self._log.notice(
            f"*[ADDED]* <{remote.web_view_link}|{remote.name}> to `{_display(folder)}`"
        )
        return remote

    async def update_file(self, remote: RemoteFile, tracked: TrackedFile) -> RemoteFile:
        """
        Re-upload content and stamp the new fingerprint; location is unchanged.

        Raises:
            UpdateError: if Drive does not confirm the update.
        """
        description = f"Updated by {APP_NAME} upon hash {tracked.fingerprint}"
        properties = dict(remote.properties)
        properties[FINGERPRINT_PROPERTY] = tracked.fingerprint

        ref = await run_sync(
            self._controller.update_file,
            remote.id,
            self.local_path(tracked),
            description=description,
            properties=properties,
        )
        if not ref.id:
            raise UpdateError(
                "Drive file updated but no ID returned",
                details={"path": remote.full_path},
            )

        remote.description = description
        remote.properties = properties

        self._log.debug(f"Updated file on drive: [{remote.full_path}]")
        self._log.notice(
            f"*[MODIFIED]* <{remote.web_view_link}|{remote.name}> at `{_display(remote.folder)}`"
        )
        return remote

    async def delete_file(
        self,
        remote: RemoteFile,
        tracked: Optional[TrackedFile] = None,
    ) -> RemoteFile:
        """
        Trash a remote file after stamping its final fingerprint.

        On success the tracked record (if any) is dropped and the owning
        folder is trashed as well once nothing references it any more.

        Raises:
            DeletionError: if Drive does not confirm the trash.
        """
        fingerprint = tracked.fingerprint if tracked is not None else NO_HASH
        description = f"Deleted by {APP_NAME} upon hash {fingerprint}"
        properties = dict(remote.properties)
        properties[FINGERPRINT_PROPERTY] = fingerprint
        folder = remote.folder

        ref = await run_sync(
            self._controller.trash,
            remote.id,
            description=description,
            properties=properties,
        )
        if not ref.id:
            raise DeletionError(
                "Drive file trashed but no ID returned",
                details={"path": remote.full_path},
            )

        remote.description = description
        remote.properties = properties
        self._inventory.remove_file(remote)
        if tracked is not None:
            self._forget_tracked(tracked)

        self._log.debug(f"Deleted file on drive: [{remote.full_path}]")
        self._log.notice(f"*[REMOVED]* _{remote.name}_ from `{_display(folder)}`")

        try:
            await self._prune_folders(folder)
        except SyncError as exc:
            self._log.error(f"Unable to delete folder in drive:\n    {folder.full_path}\n    {exc}")
        return remote

    async def delete_folder(self, folder: RemoteFolder) -> None:
        """
        Trash a remote folder and drop it from the inventory.

        Raises:
            DeletionError: for the root folder, or if Drive does not confirm.
        """
        if folder.is_root:
            raise DeletionError("The root folder is never deleted")

        ref = await run_sync(self._controller.trash, folder.id)
        if not ref.id:
            raise DeletionError(
                "Drive folder trashed but no ID returned",
                details={"path": folder.full_path},
            )

        self._inventory.remove_folder(folder)
        self._folders_deleted.append(folder.full_path)
        self._log.debug(f"Deleted folder on drive: [{folder.full_path}]")

    def local_path(self, tracked: TrackedFile) -> str:
        """Local filesystem path of a tracked file ('/'-separated full_path)."""
        return os.path.join(self._git_root or "", *tracked.full_path.split("/"))

    # ----------------------------
    # Notices
    # ----------------------------
    async def flush_notices(self) -> int:
        """Post pending notices to the channels. Without channels, notices stay in the run log."""
        if not self._channels:
            return 0
        self._aggregator.collect(self._log)
        if not self._aggregator.pending:
            return 0
        return await self._aggregator.flush(self._channels, self._log)

    async def _flush_periodically(self, stop: asyncio.Event) -> None:
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=self._flush_interval_sec)
            except asyncio.TimeoutError:
                await self.flush_notices()

    # ----------------------------
    # Internals
    # ----------------------------
    async def _prune_folders(self, folder: RemoteFolder) -> None:
        current: Optional[RemoteFolder] = folder
        while current is not None and self._is_unreferenced(current):
            parent_path = posixpath.dirname(current.full_path)
            self._folders_deleting.add(current.full_path)
            try:
                await self.delete_folder(current)
            finally:
                self._folders_deleting.discard(current.full_path)
            current = self._inventory.folder(parent_path)

    def _is_unreferenced(self, folder: RemoteFolder) -> bool:
        # Evaluated right after the file removal committed, without awaiting,
        # so inventory and tracked list are read at the same point.
        if folder.is_root or folder.full_path in self._folders_deleting:
            return False
        if self._inventory.folder(folder.full_path) is not folder:
            return False
        if folder.files or self._inventory.child_folders(folder):
            return False
        prefix = folder.full_path + "/"
        return not any(
            tf.folder_path == folder.full_path or tf.folder_path.startswith(prefix)
            for tf in self._tracked
            if not tf.is_deleted
        )

    def _forget_tracked(self, tracked: TrackedFile) -> None:
        for i, tf in enumerate(self._tracked):
            if tf is tracked:
                del self._tracked[i]
                return

    def _dry_run_result(self, op: SyncOperation) -> OperationResult:
        verb = {
            OperationKind.CREATE: "create",
            OperationKind.UPDATE: "update",
            OperationKind.DELETE: "delete",
        }[op.kind]
        self._log.notice(f"[DRY RUN] would {verb} `{op.path}`")
        return OperationResult(seq=op.seq, kind=op.kind.value, path=op.path, status="skipped")


def _display(folder: RemoteFolder) -> str:
    return folder.full_path or "/"


def _success_result(op: SyncOperation, remote_id: Optional[str]) -> OperationResult:
    return OperationResult(
        seq=op.seq,
        kind=op.kind.value,
        path=op.path,
        status="success",
        remote_id=remote_id,
    )


def _failed_result(op: SyncOperation, exc: BaseException) -> OperationResult:
    return OperationResult(
        seq=op.seq,
        kind=op.kind.value,
        path=op.path,
        status="failed",
        error_type=exc.__class__.__name__,
        error_message=str(exc),
        error_details=getattr(exc, "details", None),
    )


async def sync_repository(
    settings: Settings,
    run_log: RunLog,
    *,
    controller: Any = None,
    enumerator: Optional[SourceEnumerator] = None,
    channels: Optional[Sequence[NotificationChannel]] = None,
) -> SyncResult:
    """
    Run one reconciliation pass: auth, enumerate, inventory, plan, apply.

    Setup failures (configuration, auth, enumeration, inventory) are logged
    and give a "failed" result; per-operation failures do not.
    """
    try:
        settings.require()
        _log_settings(settings, run_log)
        matcher = PathMatcher(settings.git_glob, implicit_base=settings.git_glob_implicit_base)

        if controller is None:
            run_log.debug("Connecting to Google Drive.")
            provider = CredentialProvider(
                _auth_info(settings),
                interactive=settings.google_oauth_interactive,
            )
            credentials = await run_sync(provider.authorize)
            controller = GoogleDriveController(credentials)

        source = enumerator if enumerator is not None else GitSourceEnumerator(
            run_log, since=settings.git_since
        )

        run_log.debug("Building GIT file list.")
        tracked = await run_sync(
            source.list_tracked_files,
            settings.git_root,
            settings.git_origin or "",
            settings.git_subdir,
            matcher,
        )

        run_log.debug("Building Google Drive file list.")
        inventory = await build_inventory(controller, settings.gdrive_folderid or "", run_log)
    except SyncError as exc:
        run_log.error(f"Error: {exc}")
        return SyncResult(status="failed")

    if channels is None:
        channels = SlackConfig(settings.slack_channels).channels()

    manager = DriveSyncManager(
        controller,
        inventory,
        tracked,
        run_log=run_log,
        git_root=settings.git_root,
        channels=channels,
        aggregator=NotificationAggregator(settings.slack_max_chars),
        dry_run=settings.dry_run,
        max_concurrency=settings.max_concurrency,
    )

    run_log.debug("Computing actions to perform.")
    operations = manager.plan()
    if not operations:
        run_log.debug("No actions required.")
        return SyncResult(status="success")

    run_log.debug(f"Executing {len(operations)} required action(s).")
    result = await manager.apply(operations)
    run_log.debug(f"Process completed: {result.summary}")
    return result


def _auth_info(settings: Settings) -> AuthInfo:
    if settings.uses_oauth:
        return AuthInfo.oauth(
            settings.google_oauth_client_secrets or "",
            settings.google_oauth_token or "",
        )
    return AuthInfo.service_account(settings.google_key or "", settings.google_subject)


def _log_settings(settings: Settings, run_log: RunLog) -> None:
    # Credentials and webhook URLs are never logged.
    run_log.debug(f"GOOGLE_AUTH: [{'oauth' if settings.uses_oauth else 'service account'}]")
    run_log.debug(f"GDRIVE_FOLDERID: [{settings.gdrive_folderid}]")
    run_log.debug(f"GIT_ROOT: [{settings.git_root or ''}]")
    run_log.debug(f"GIT_SUBDIR: [{settings.git_subdir}]")
    run_log.debug(f"GIT_ORIGIN: [{settings.git_origin}]")
    run_log.debug(f"GIT_SINCE: [{settings.git_since or ''}]")
    run_log.debug(f"GIT_GLOB: [{settings.git_glob or ''}]")
    run_log.debug(f"SLACK_CHANNELS: [{len(SlackConfig(settings.slack_channels).urls)} channel(s)]")
    run_log.debug(f"DRY_RUN: [{'true' if settings.dry_run else 'false or not set'}]")
