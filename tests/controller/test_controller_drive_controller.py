import json
import os
import tempfile
import unittest
from unittest.mock import Mock, patch

from googleapiclient.errors import HttpError

from gitdrivesync.controller.drive_controller import (
    GoogleDriveController,
    _item_to_file_entry,
    _to_ref,
)
from gitdrivesync.errors import (
    ConfigurationError,
    LocalFileError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
)
from gitdrivesync.util.mime import FOLDER_MIME


def _http_error(status: int, reason: str, message: str = "err") -> HttpError:
    resp = Mock()
    resp.status = status
    resp.reason = reason
    body = {"error": {"message": message, "errors": [{"reason": reason}]}}
    return HttpError(resp=resp, content=json.dumps(body).encode("utf-8"))


class TestDriveControllerHelpers(unittest.TestCase):
    def test_item_to_file_entry(self) -> None:
        entry = _item_to_file_entry(
            "P1",
            {
                "id": "F1",
                "name": "a.txt",
                "mimeType": "text/plain",
                "webViewLink": "https://drive/F1",
                "description": "Created by Github2Drive upon hash abc",
                "properties": {"gitHash": "abc"},
                "trashed": False,
            },
        )
        self.assertEqual(entry.folder_id, "P1")
        self.assertEqual(entry.id, "F1")
        self.assertEqual(entry.web_view_link, "https://drive/F1")
        self.assertEqual(entry.properties, {"gitHash": "abc"})
        self.assertFalse(entry.trashed)

    def test_item_to_file_entry_missing_optional_fields(self) -> None:
        entry = _item_to_file_entry("P1", {"id": "F1", "name": "a"})
        self.assertIsNone(entry.web_view_link)
        self.assertIsNone(entry.description)
        self.assertEqual(entry.properties, {})

    def test_to_ref_without_id(self) -> None:
        self.assertIsNone(_to_ref({}).id)
        self.assertIsNone(_to_ref(None).id)
        self.assertEqual(_to_ref({"id": "X", "webViewLink": "L"}).web_view_link, "L")


class TestDriveControllerMocked(unittest.TestCase):
    def _controller(self):
        service = Mock()
        files_resource = Mock()
        service.files.return_value = files_resource
        return GoogleDriveController.from_service(service), files_resource

    def test_list_children_includes_supports_all_drives_kwargs(self) -> None:
        controller, files_resource = self._controller()
        files_resource.list.return_value.execute.return_value = {"files": []}

        controller._list_children_raw("P1")

        kwargs = files_resource.list.call_args.kwargs
        self.assertTrue(kwargs.get("supportsAllDrives"))
        self.assertTrue(kwargs.get("includeItemsFromAllDrives"))
        self.assertIn("'P1' in parents", kwargs["q"])
        self.assertIn("trashed=false", kwargs["q"])

    def test_list_children_follows_pages(self) -> None:
        controller, files_resource = self._controller()
        files_resource.list.return_value.execute.side_effect = [
            {"files": [{"id": "A"}], "nextPageToken": "t2"},
            {"files": [{"id": "B"}]},
        ]

        items = controller._list_children_raw("P1")

        self.assertEqual([i["id"] for i in items], ["A", "B"])
        self.assertEqual(files_resource.list.call_args.kwargs["pageToken"], "t2")

    def test_get_hierarchy_walks_folders(self) -> None:
        controller, files_resource = self._controller()
        files_resource.get.return_value.execute.return_value = {
            "id": "R",
            "name": "ROOT",
            "mimeType": FOLDER_MIME,
        }
        children = {
            "R": [
                {"id": "A", "name": "a", "mimeType": FOLDER_MIME},
                {"id": "F1", "name": "top.txt", "mimeType": "text/plain"},
            ],
            "A": [{"id": "F2", "name": "x.txt", "mimeType": "text/plain", "properties": {"gitHash": "h"}}],
        }

        def list_side_effect(**kwargs):
            parent = kwargs["q"].split("'")[1]
            req = Mock()
            req.execute.return_value = {"files": children.get(parent, [])}
            return req

        files_resource.list.side_effect = list_side_effect

        hierarchy = controller.get_hierarchy("R")

        self.assertEqual(hierarchy.root_id, "R")
        paths = {f.id: f.id_path for f in hierarchy.folders}
        self.assertEqual(paths, {"R": ("R",), "A": ("R", "A")})
        files = {f.id: f.folder_id for f in hierarchy.files}
        self.assertEqual(files, {"F1": "R", "F2": "A"})

    def test_get_hierarchy_rejects_non_folder_root(self) -> None:
        controller, files_resource = self._controller()
        files_resource.get.return_value.execute.return_value = {
            "id": "R",
            "name": "file",
            "mimeType": "text/plain",
        }
        with self.assertRaises(ConfigurationError):
            controller.get_hierarchy("R")

    def test_create_folder_body(self) -> None:
        controller, files_resource = self._controller()
        files_resource.create.return_value.execute.return_value = {"id": "NF"}

        ref = controller.create_folder("docs", "R")

        self.assertEqual(ref.id, "NF")
        body = files_resource.create.call_args.kwargs["body"]
        self.assertEqual(body, {"name": "docs", "mimeType": FOLDER_MIME, "parents": ["R"]})

    def test_create_file_uploads_with_metadata(self) -> None:
        controller, files_resource = self._controller()
        files_resource.create.return_value.execute.return_value = {
            "id": "F",
            "webViewLink": "https://drive/F",
        }
        with patch("gitdrivesync.controller.drive_controller.MediaFileUpload") as media:
            ref = controller.create_file(
                "/repo/a.txt",
                "R",
                name="a.txt",
                description="Created",
                properties={"gitHash": "h"},
            )

        media.assert_called_once_with("/repo/a.txt", resumable=True)
        kwargs = files_resource.create.call_args.kwargs
        self.assertEqual(kwargs["body"]["properties"], {"gitHash": "h"})
        self.assertEqual(kwargs["fields"], "id,webViewLink")
        self.assertEqual(ref.web_view_link, "https://drive/F")

    def test_create_file_missing_local_file(self) -> None:
        controller, files_resource = self._controller()
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(LocalFileError):
                controller.create_file(os.path.join(tmp, "missing.txt"), "R", name="missing.txt")
        files_resource.create.assert_not_called()

    def test_trash_stamps_metadata(self) -> None:
        controller, files_resource = self._controller()
        files_resource.update.return_value.execute.return_value = {"id": "F"}

        ref = controller.trash("F", description="Deleted", properties={"gitHash": "h"})

        self.assertEqual(ref.id, "F")
        body = files_resource.update.call_args.kwargs["body"]
        self.assertEqual(body, {"trashed": True, "description": "Deleted", "properties": {"gitHash": "h"}})

    def test_trash_without_returned_id(self) -> None:
        controller, files_resource = self._controller()
        files_resource.update.return_value.execute.return_value = {}
        self.assertIsNone(controller.trash("F").id)

    def test_get_maps_http_404_to_not_found(self) -> None:
        controller, files_resource = self._controller()
        files_resource.get.return_value.execute.side_effect = _http_error(404, "notFound")

        with self.assertRaises(NotFoundError):
            controller.get("X")

    def test_403_without_quota_reason_is_not_retried(self) -> None:
        controller, files_resource = self._controller()
        req = files_resource.get.return_value
        req.execute.side_effect = _http_error(403, "insufficientPermissions")

        with patch("time.sleep", return_value=None):
            with self.assertRaises(PermissionDeniedError):
                controller.get("X")
        self.assertEqual(req.execute.call_count, 1)

    def test_retry_on_429(self) -> None:
        controller, files_resource = self._controller()
        req = files_resource.get.return_value
        http_err = _http_error(429, "rateLimitExceeded", "rate limited")

        # Fail twice, then succeed.
        req.execute.side_effect = [
            http_err,
            http_err,
            {"id": "F1", "name": "n", "mimeType": "text/plain"},
        ]

        with patch("time.sleep", return_value=None):
            info = controller.get("F1")

        self.assertEqual(info["id"], "F1")
        self.assertEqual(req.execute.call_count, 3)

    def test_retry_on_5xx_then_gives_up(self) -> None:
        controller, files_resource = self._controller()
        req = files_resource.get.return_value
        req.execute.side_effect = _http_error(503, "backendError")

        with patch("time.sleep", return_value=None) as sleep:
            with self.assertRaises(Exception):
                controller.get("X")

        self.assertEqual(req.execute.call_count, 4)
        self.assertEqual([c.args[0] for c in sleep.call_args_list], [1.0, 2.0, 4.0])

    def test_map_429_to_rate_limit_error(self) -> None:
        controller, files_resource = self._controller()
        files_resource.get.return_value.execute.side_effect = _http_error(429, "rateLimitExceeded")

        with patch("time.sleep", return_value=None):
            with self.assertRaises(RateLimitError):
                controller.get("X")


if __name__ == "__main__":
    unittest.main()
