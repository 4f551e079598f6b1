"""Data model for the remote (Drive) folder/file hierarchy."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

FINGERPRINT_PROPERTY: str = "gitHash"
NO_HASH: str = "no-hash"
BAD_LINK: str = "about:blank"


@dataclass(slots=True, eq=False)
class RemoteFolder:
    """
    A folder inside the synced Drive root.

    full_path excludes the root's own name; the root itself has full_path ''.
    id_path lists folder ids from the root down to this folder.
    """

    id: str
    name: str
    full_path: str = ""
    id_path: list[str] = field(default_factory=list)
    files: list[RemoteFile] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.full_path == ""


@dataclass(slots=True, eq=False)
class RemoteFile:
    """A file already present in the synced Drive root."""

    id: str
    name: str
    folder: RemoteFolder
    web_view_link: str = BAD_LINK
    description: Optional[str] = None
    properties: dict[str, str] = field(default_factory=dict)

    @property
    def full_path(self) -> str:
        if not self.folder.full_path:
            return self.name
        return f"{self.folder.full_path}/{self.name}"

    @property
    def fingerprint(self) -> Optional[str]:
        return self.properties.get(FINGERPRINT_PROPERTY)
