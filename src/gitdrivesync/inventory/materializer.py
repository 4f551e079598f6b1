"""Lazy, memoized creation of remote folder paths."""

from __future__ import annotations

import asyncio
import posixpath
from typing import Any

from gitdrivesync.errors import CreationError
from gitdrivesync.models import RemoteFolder
from gitdrivesync.runlog import RunLog
from gitdrivesync.util.aio import run_sync

from .remote_inventory import RemoteInventory, normalize_folder_path


class FolderMaterializer:
    """
    Create remote folders on demand, one path component at a time.

    Existing folders come from the inventory. A folder being created is
    tracked as a pending task, so concurrent requests for the same path wait
    for that task instead of creating a duplicate.
    """

    def __init__(self, controller: Any, inventory: RemoteInventory, run_log: RunLog) -> None:
        self._controller = controller
        self._inventory = inventory
        self._log = run_log
        self._pending: dict[str, asyncio.Task[RemoteFolder]] = {}

    async def ensure_folder(self, path: str) -> RemoteFolder:
        """
        Return the folder at path, creating it and any missing parents.

        Raises:
            CreationError: if the root is missing or Drive returns no id.
        """
        path = normalize_folder_path(path)
        folder = self._inventory.folder(path)
        if folder is not None:
            return folder

        if path == "":
            raise CreationError("Unable to find root folder in drive")

        task = self._pending.get(path)
        if task is None:
            task = asyncio.create_task(self._create(path))
            self._pending[path] = task
            task.add_done_callback(lambda _t, p=path: self._pending.pop(p, None))
        return await asyncio.shield(task)

    async def _create(self, path: str) -> RemoteFolder:
        parent = await self.ensure_folder(posixpath.dirname(path))
        name = posixpath.basename(path)

        ref = await run_sync(self._controller.create_folder, name, parent.id)
        if not ref.id:
            raise CreationError(
                "Drive folder created but no ID returned",
                details={"path": path},
            )

        folder = RemoteFolder(
            id=ref.id,
            name=name,
            full_path=path,
            id_path=parent.id_path + [ref.id],
        )
        self._inventory.add_folder(folder)
        self._log.debug(f"Created folder on drive: [{path}]")
        return folder
