"""Google Drive API controller (internal use only)."""

from __future__ import annotations

import json
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

import google_auth_httplib2
import httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import HttpRequest, MediaFileUpload

from gitdrivesync.errors import (
    ConfigurationError,
    HttpErrorInfo,
    LocalFileError,
    NetworkError,
    RateLimitError,
    RemoteApiError,
    map_http_error,
)
from gitdrivesync.models import DriveHierarchy, FileEntry, FolderEntry, RemoteRef
from gitdrivesync.util.mime import FOLDER_MIME, is_folder

from .fields import CREATED_FILE_FIELDS, ID_FIELDS, ITEM_FIELDS, LIST_FIELDS

T = TypeVar("T")


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class GoogleDriveController:
    """
    Drive API controller (internal only).

    Notes:
        - Calls are blocking; async callers go through util.aio.run_sync.
        - Every request gets its own authorized http object, so calls may
          run concurrently from worker threads.
        - `supports_all_drives` is applied to all requests consistently.
    """

    def __init__(
        self,
        credentials: Any,
        *,
        supports_all_drives: bool = True,
    ) -> None:
        self._supports_all_drives = supports_all_drives
        self._retry_policy = _RetryPolicy()
        self._service = _build_drive_service(credentials)

    @classmethod
    def from_service(
        cls,
        service: Any,
        *,
        supports_all_drives: bool = True,
        retry_policy: Optional[_RetryPolicy] = None,
    ) -> "GoogleDriveController":
        """Create controller from a pre-built Drive service (useful for tests)."""
        obj = cls.__new__(cls)
        obj._supports_all_drives = supports_all_drives
        obj._retry_policy = retry_policy or _RetryPolicy()
        obj._service = service
        return obj

    # ----------------------------
    # Read API
    # ----------------------------
    def get(self, file_id: str) -> dict[str, Any]:
        req = self._service.files().get(
            fileId=file_id,
            fields=ITEM_FIELDS,
            **self._common_kwargs(),
        )
        return self._execute(req.execute)

    def get_hierarchy(self, root_id: str) -> DriveHierarchy:
        """
        List every folder and file under root_id (BFS).

        Returns:
            The root folder plus all descendant folders, each with its id
            chain from the root, and every non-folder item with the id of the
            folder it was listed in.

        Raises:
            ConfigurationError: if root_id is not a folder.
        """
        root = self.get(root_id)
        if not is_folder(root.get("mimeType", "")):
            raise ConfigurationError(
                "Drive root must be a folder",
                details={"root_id": root_id},
            )

        hierarchy = DriveHierarchy(root_id=root_id)
        hierarchy.folders.append(
            FolderEntry(id=root_id, name=str(root.get("name", "")), id_path=(root_id,))
        )

        queue: deque[tuple[str, tuple[str, ...]]] = deque([(root_id, (root_id,))])
        seen_folders: set[str] = set()

        while queue:
            parent_id, id_path = queue.popleft()
            if parent_id in seen_folders:
                continue
            seen_folders.add(parent_id)

            for item in self._list_children_raw(parent_id):
                item_id = item.get("id")
                if not isinstance(item_id, str):
                    continue
                if is_folder(item.get("mimeType", "")):
                    child_path = id_path + (item_id,)
                    hierarchy.folders.append(
                        FolderEntry(id=item_id, name=str(item.get("name", "")), id_path=child_path)
                    )
                    queue.append((item_id, child_path))
                else:
                    hierarchy.files.append(_item_to_file_entry(parent_id, item))

        return hierarchy

    # ----------------------------
    # Write API
    # ----------------------------
    def create_folder(self, name: str, parent_id: str) -> RemoteRef:
        body = {"name": name, "mimeType": FOLDER_MIME, "parents": [parent_id]}
        req = self._service.files().create(
            body=body,
            fields=ID_FIELDS,
            **self._common_kwargs(),
        )
        data = self._execute(req.execute)
        return _to_ref(data)

    def create_file(
        self,
        local_path: str,
        parent_id: str,
        *,
        name: str,
        description: Optional[str] = None,
        properties: Optional[dict[str, str]] = None,
    ) -> RemoteRef:
        body: dict[str, Any] = {"name": name, "parents": [parent_id]}
        if description is not None:
            body["description"] = description
        if properties is not None:
            body["properties"] = properties

        req = self._service.files().create(
            body=body,
            media_body=_media(local_path),
            fields=CREATED_FILE_FIELDS,
            **self._common_kwargs(),
        )
        data = self._execute(req.execute)
        return _to_ref(data)

    def update_file(
        self,
        file_id: str,
        local_path: str,
        *,
        description: Optional[str] = None,
        properties: Optional[dict[str, str]] = None,
    ) -> RemoteRef:
        """Re-upload content and overwrite metadata; the parent is left as is."""
        body: dict[str, Any] = {}
        if description is not None:
            body["description"] = description
        if properties is not None:
            body["properties"] = properties

        req = self._service.files().update(
            fileId=file_id,
            body=body,
            media_body=_media(local_path),
            fields=ID_FIELDS,
            **self._common_kwargs(),
        )
        data = self._execute(req.execute)
        return _to_ref(data)

    def trash(
        self,
        file_id: str,
        *,
        description: Optional[str] = None,
        properties: Optional[dict[str, str]] = None,
    ) -> RemoteRef:
        """Move an item to the trash, optionally stamping its metadata first."""
        body: dict[str, Any] = {"trashed": True}
        if description is not None:
            body["description"] = description
        if properties is not None:
            body["properties"] = properties

        req = self._service.files().update(
            fileId=file_id,
            body=body,
            fields=ID_FIELDS,
            **self._common_kwargs(),
        )
        data = self._execute(req.execute)
        return _to_ref(data)

    # ----------------------------
    # Internals
    # ----------------------------
    def _common_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True}

    def _common_list_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True, "includeItemsFromAllDrives": True}

    def _list_children_raw(self, parent_id: str) -> list[dict[str, Any]]:
        q = f"'{parent_id}' in parents and trashed=false"
        items: list[dict[str, Any]] = []
        page_token: Optional[str] = None

        while True:
            req = self._service.files().list(
                q=q,
                fields=LIST_FIELDS,
                pageToken=page_token,
                **self._common_list_kwargs(),
            )
            data = self._execute(req.execute)
            items.extend(f for f in data.get("files", []) if isinstance(f, dict))

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return items

    def _execute(self, func: Callable[[], T]) -> T:
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            try:
                return func()
            except Exception as exc:
                mapped = self._map_exception(exc)
                if self._should_retry(mapped) and attempt < self._retry_policy.max_retries:
                    time.sleep(delay)
                    delay *= 2
                    continue
                raise mapped from exc

        raise RemoteApiError("Unexpected retry loop termination")

    def _should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, (RateLimitError, NetworkError)):
            return True
        if type(exc) is RemoteApiError:
            status_code = exc.details.get("status_code")
            return isinstance(status_code, int) and 500 <= status_code <= 599
        return False

    def _map_exception(self, exc: Exception) -> Exception:
        if isinstance(exc, HttpError):
            info = _http_error_to_info(exc)
            return map_http_error(info, cause=exc)

        if isinstance(exc, (OSError, TimeoutError, httplib2.HttpLib2Error)):
            return NetworkError("Network error", cause=exc)

        return RemoteApiError("Drive API error", cause=exc)


def _build_drive_service(credentials: Any) -> Any:
    # httplib2.Http is not thread-safe: give each request its own.
    def build_request(_http: Any, *args: Any, **kwargs: Any) -> HttpRequest:
        new_http = google_auth_httplib2.AuthorizedHttp(credentials, http=httplib2.Http())
        return HttpRequest(new_http, *args, **kwargs)

    authorized_http = google_auth_httplib2.AuthorizedHttp(credentials, http=httplib2.Http())
    return build(
        "drive",
        "v3",
        requestBuilder=build_request,
        http=authorized_http,
        cache_discovery=False,
    )


def _media(local_path: str) -> MediaFileUpload:
    try:
        return MediaFileUpload(local_path, resumable=True)
    except OSError as exc:
        raise LocalFileError(
            "Unable to read local file for upload",
            details={"local_path": local_path},
            cause=exc,
        ) from exc


def _to_ref(data: Any) -> RemoteRef:
    if not isinstance(data, dict):
        return RemoteRef()
    file_id = data.get("id")
    link = data.get("webViewLink")
    return RemoteRef(
        id=file_id if isinstance(file_id, str) and file_id else None,
        web_view_link=link if isinstance(link, str) else None,
    )


def _item_to_file_entry(folder_id: str, item: dict[str, Any]) -> FileEntry:
    props = item.get("properties")
    description = item.get("description")
    link = item.get("webViewLink")
    return FileEntry(
        folder_id=folder_id,
        id=str(item["id"]),
        name=str(item.get("name", "")),
        web_view_link=link if isinstance(link, str) else None,
        description=description if isinstance(description, str) else None,
        properties={str(k): str(v) for k, v in props.items()} if isinstance(props, dict) else {},
        trashed=bool(item.get("trashed", False)),
    )


def _http_error_to_info(exc: Any) -> HttpErrorInfo:
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            payload = {}
        err = payload.get("error", {}) if isinstance(payload, dict) else {}
        if isinstance(err, dict):
            message = err.get("message") or None
            errors = err.get("errors") or []
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                details["domain"] = errors[0].get("domain")
                if isinstance(errors[0].get("reason"), str):
                    reason = errors[0]["reason"]

    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
