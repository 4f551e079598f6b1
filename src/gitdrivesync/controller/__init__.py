"""Drive API collaborator exports for gitdrivesync."""

from __future__ import annotations

from .drive_controller import GoogleDriveController
from .fields import CREATED_FILE_FIELDS, ID_FIELDS, ITEM_FIELDS, LIST_FIELDS

__all__ = [
    "GoogleDriveController",
    "ITEM_FIELDS",
    "LIST_FIELDS",
    "ID_FIELDS",
    "CREATED_FILE_FIELDS",
]
