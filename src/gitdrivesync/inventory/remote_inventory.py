"""In-memory mirror of the synced Drive folder."""

from __future__ import annotations

import posixpath
from typing import Any, Optional

from gitdrivesync.errors import RetrievalError, SyncError
from gitdrivesync.models import BAD_LINK, DriveHierarchy, RemoteFile, RemoteFolder
from gitdrivesync.runlog import RunLog
from gitdrivesync.util.aio import run_sync


def normalize_folder_path(path: str) -> str:
    """Normalize a folder path: '.' and '' mean the root, no edge slashes."""
    if path in ("", ".", "/"):
        return ""
    return path.strip("/")


class RemoteInventory:
    """
    Remote folders (keyed by full path, root at '') and files of one Drive root.

    Mutations happen on the event-loop thread only, after the corresponding
    remote call has been confirmed.
    """

    def __init__(self, root_id: str) -> None:
        self.root_id = root_id
        self.folders_by_path: dict[str, RemoteFolder] = {}
        self.files: list[RemoteFile] = []

    @classmethod
    def from_hierarchy(
        cls,
        hierarchy: DriveHierarchy,
        run_log: Optional[RunLog] = None,
    ) -> RemoteInventory:
        """
        Build the inventory from a raw listing.

        Folders are created first, then full paths are resolved from the id
        chain (root name skipped), then files are attached to their folder.
        Trashed files are dropped.
        """
        inv = cls(hierarchy.root_id)
        folders_by_id: dict[str, RemoteFolder] = {}

        for entry in hierarchy.folders:
            folders_by_id[entry.id] = RemoteFolder(
                id=entry.id,
                name=entry.name,
                id_path=list(entry.id_path),
            )

        for folder in folders_by_id.values():
            if folder.id_path[:1] != [hierarchy.root_id]:
                raise RetrievalError(
                    "Folder lies outside the synced root",
                    details={"folder_id": folder.id},
                )
            try:
                folder.full_path = "/".join(folders_by_id[fid].name for fid in folder.id_path[1:])
            except KeyError as exc:
                raise RetrievalError(
                    "Folder hierarchy references an unknown parent",
                    details={"folder_id": folder.id},
                    cause=exc,
                ) from exc
            inv.add_folder(folder)
            if run_log is not None:
                run_log.debug(f"Folder: '{folder.full_path}'")

        for file_entry in hierarchy.files:
            if file_entry.trashed:
                continue
            parent = folders_by_id.get(file_entry.folder_id)
            if parent is None:
                raise RetrievalError(
                    "File listed under an unknown folder",
                    details={"file_id": file_entry.id, "folder_id": file_entry.folder_id},
                )
            remote = RemoteFile(
                id=file_entry.id,
                name=file_entry.name,
                folder=parent,
                web_view_link=file_entry.web_view_link or BAD_LINK,
                description=file_entry.description,
                properties=dict(file_entry.properties or {}),
            )
            inv.add_file(remote)
            if run_log is not None:
                run_log.debug(f"    File: '{remote.full_path}' [{remote.fingerprint}]")

        if "" not in inv.folders_by_path:
            raise RetrievalError(
                "Root folder is missing from the hierarchy",
                details={"root_id": hierarchy.root_id},
            )
        return inv

    # ----------------------------
    # Query helpers
    # ----------------------------
    @property
    def root(self) -> RemoteFolder:
        return self.folders_by_path[""]

    @property
    def folders(self) -> list[RemoteFolder]:
        return list(self.folders_by_path.values())

    def folder(self, path: str) -> Optional[RemoteFolder]:
        return self.folders_by_path.get(normalize_folder_path(path))

    def file_by_path(self, full_path: str) -> Optional[RemoteFile]:
        for f in self.files:
            if f.full_path == full_path:
                return f
        return None

    def child_folders(self, folder: RemoteFolder) -> list[RemoteFolder]:
        return [
            f
            for f in self.folders_by_path.values()
            if f is not folder and posixpath.dirname(f.full_path) == folder.full_path
        ]

    # ----------------------------
    # Mutation helpers (keep folder/file lists consistent)
    # ----------------------------
    def add_folder(self, folder: RemoteFolder) -> None:
        self.folders_by_path[normalize_folder_path(folder.full_path)] = folder

    def remove_folder(self, folder: RemoteFolder) -> None:
        key = normalize_folder_path(folder.full_path)
        if self.folders_by_path.get(key) is folder:
            del self.folders_by_path[key]

    def add_file(self, remote: RemoteFile) -> None:
        remote.folder.files.append(remote)
        self.files.append(remote)

    def remove_file(self, remote: RemoteFile) -> None:
        if remote in remote.folder.files:
            remote.folder.files.remove(remote)
        if remote in self.files:
            self.files.remove(remote)


async def build_inventory(
    controller: Any,
    root_id: str,
    run_log: RunLog,
) -> RemoteInventory:
    """
    Fetch the Drive hierarchy under root_id and build the inventory.

    Raises:
        RetrievalError: if the listing fails (not retried here).
    """
    try:
        hierarchy = await run_sync(controller.get_hierarchy, root_id)
    except SyncError as exc:
        raise RetrievalError(
            "Error retrieving Google Drive contents",
            details={"root_id": root_id, "error": str(exc)},
            cause=exc,
        ) from exc
    return RemoteInventory.from_hierarchy(hierarchy, run_log)
