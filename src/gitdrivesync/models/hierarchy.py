"""Raw Drive listing returned by the controller, before inventory building."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(slots=True, frozen=True)
class FolderEntry:
    """
    One folder under the root (the root itself included).

    id_path is the chain of folder ids from the root down to this folder.
    """

    id: str
    name: str
    id_path: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class FileEntry:
    """One non-folder item, with the id of the folder listing it."""

    folder_id: str
    id: str
    name: str
    web_view_link: Optional[str] = None
    description: Optional[str] = None
    properties: dict[str, str] = field(default_factory=dict)
    trashed: bool = False


@dataclass(slots=True)
class DriveHierarchy:
    root_id: str
    folders: list[FolderEntry] = field(default_factory=list)
    files: list[FileEntry] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class RemoteRef:
    """What a Drive mutation call confirmed; id is None when nothing was returned."""

    id: Optional[str] = None
    web_view_link: Optional[str] = None
