"""Field definitions for Google Drive API responses."""

from __future__ import annotations

ITEM_FIELDS: str = (
    "id,"
    "name,"
    "mimeType,"
    "parents,"
    "trashed,"
    "webViewLink,"
    "description,"
    "properties"
)

LIST_FIELDS: str = f"nextPageToken,files({ITEM_FIELDS})"

ID_FIELDS: str = "id"

CREATED_FILE_FIELDS: str = "id,webViewLink"
