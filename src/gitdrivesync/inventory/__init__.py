"""Remote inventory exports for gitdrivesync."""

from __future__ import annotations

from .materializer import FolderMaterializer
from .remote_inventory import RemoteInventory, build_inventory, normalize_folder_path

__all__ = [
    "RemoteInventory",
    "FolderMaterializer",
    "build_inventory",
    "normalize_folder_path",
]
