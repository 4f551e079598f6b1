import unittest

from gitdrivesync.errors import NotFoundError, RetrievalError
from gitdrivesync.inventory import RemoteInventory, build_inventory, normalize_folder_path
from gitdrivesync.models import BAD_LINK, DriveHierarchy, FileEntry, FolderEntry, RemoteFile
from gitdrivesync.runlog import RunLog


def _hierarchy() -> DriveHierarchy:
    return DriveHierarchy(
        root_id="R",
        folders=[
            FolderEntry(id="R", name="ROOT", id_path=("R",)),
            FolderEntry(id="F1", name="F1", id_path=("R", "F1")),
            FolderEntry(id="F2", name="F2", id_path=("R", "F1", "F2")),
        ],
        files=[
            FileEntry(folder_id="R", id="a", name="top.txt", properties={"gitHash": "h1"}),
            FileEntry(folder_id="F2", id="b", name="x.txt", web_view_link="https://drive/b"),
            FileEntry(folder_id="F1", id="c", name="old.txt", trashed=True),
        ],
    )


class FakeController:
    def __init__(self, hierarchy=None, error=None) -> None:
        self.hierarchy = hierarchy
        self.error = error

    def get_hierarchy(self, root_id: str) -> DriveHierarchy:
        if self.error is not None:
            raise self.error
        return self.hierarchy


class TestRemoteInventory(unittest.TestCase):
    def test_normalize_folder_path(self) -> None:
        self.assertEqual(normalize_folder_path("."), "")
        self.assertEqual(normalize_folder_path("/"), "")
        self.assertEqual(normalize_folder_path("/a/b/"), "a/b")

    def test_from_hierarchy_resolves_full_paths(self) -> None:
        inv = RemoteInventory.from_hierarchy(_hierarchy())

        self.assertEqual(sorted(inv.folders_by_path), ["", "F1", "F1/F2"])
        self.assertEqual(inv.root.id, "R")
        self.assertEqual(inv.folder("F1/F2").id_path, ["R", "F1", "F2"])

    def test_from_hierarchy_skips_trashed_files(self) -> None:
        inv = RemoteInventory.from_hierarchy(_hierarchy())

        self.assertEqual(sorted(f.full_path for f in inv.files), ["F1/F2/x.txt", "top.txt"])
        self.assertIsNone(inv.file_by_path("F1/old.txt"))
        self.assertEqual(inv.folder("F1").files, [])

    def test_file_attributes(self) -> None:
        inv = RemoteInventory.from_hierarchy(_hierarchy())

        top = inv.file_by_path("top.txt")
        self.assertEqual(top.fingerprint, "h1")
        self.assertEqual(top.web_view_link, BAD_LINK)
        self.assertIs(top.folder, inv.root)
        self.assertEqual(inv.file_by_path("F1/F2/x.txt").web_view_link, "https://drive/b")

    def test_folder_outside_root_is_rejected(self) -> None:
        h = _hierarchy()
        h.folders.append(FolderEntry(id="X", name="X", id_path=("OTHER", "X")))
        with self.assertRaises(RetrievalError):
            RemoteInventory.from_hierarchy(h)

    def test_file_in_unknown_folder_is_rejected(self) -> None:
        h = _hierarchy()
        h.files.append(FileEntry(folder_id="NOPE", id="z", name="z"))
        with self.assertRaises(RetrievalError):
            RemoteInventory.from_hierarchy(h)

    def test_missing_root_is_rejected(self) -> None:
        with self.assertRaises(RetrievalError):
            RemoteInventory.from_hierarchy(DriveHierarchy(root_id="R"))

    def test_child_folders_and_mutations(self) -> None:
        inv = RemoteInventory.from_hierarchy(_hierarchy())
        f1 = inv.folder("F1")

        self.assertEqual([f.full_path for f in inv.child_folders(inv.root)], ["F1"])
        self.assertEqual([f.full_path for f in inv.child_folders(f1)], ["F1/F2"])

        remote = RemoteFile(id="n", name="new.txt", folder=f1)
        inv.add_file(remote)
        self.assertIs(inv.file_by_path("F1/new.txt"), remote)
        self.assertIn(remote, f1.files)

        inv.remove_file(remote)
        self.assertIsNone(inv.file_by_path("F1/new.txt"))
        self.assertNotIn(remote, f1.files)

        inv.remove_folder(inv.folder("F1/F2"))
        self.assertIsNone(inv.folder("F1/F2"))


class TestBuildInventory(unittest.IsolatedAsyncioTestCase):
    async def test_build_inventory(self) -> None:
        run_log = RunLog()
        inv = await build_inventory(FakeController(_hierarchy()), "R", run_log)
        self.assertEqual(len(inv.files), 2)
        self.assertIn("Folder: 'F1/F2'", run_log.trail())

    async def test_listing_failure_is_retrieval_error(self) -> None:
        controller = FakeController(error=NotFoundError("gone"))
        with self.assertRaises(RetrievalError) as ctx:
            await build_inventory(controller, "R", RunLog())
        self.assertIsInstance(ctx.exception.cause, NotFoundError)


if __name__ == "__main__":
    unittest.main()
