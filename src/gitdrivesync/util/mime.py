from __future__ import annotations

FOLDER_MIME: str = "application/vnd.google-apps.folder"


def is_folder(mime_type: str) -> bool:
    return mime_type == FOLDER_MIME
