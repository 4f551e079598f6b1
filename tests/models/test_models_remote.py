import unittest

from gitdrivesync.models import (
    BAD_LINK,
    FINGERPRINT_PROPERTY,
    FileTag,
    RemoteFile,
    RemoteFolder,
    TrackedFile,
)


class TestTrackedFile(unittest.TestCase):
    def test_name_and_folder_path(self) -> None:
        tf = TrackedFile(relative_path="a/b/c.txt", full_path="docs/a/b/c.txt", fingerprint="h")
        self.assertEqual(tf.name, "c.txt")
        self.assertEqual(tf.folder_path, "a/b")
        self.assertIs(tf.tag, FileTag.ADDED)
        self.assertFalse(tf.is_deleted)

    def test_top_level_file_has_empty_folder_path(self) -> None:
        tf = TrackedFile(relative_path="c.txt", full_path="c.txt", fingerprint="h", tag=FileTag.DELETED)
        self.assertEqual(tf.folder_path, "")
        self.assertTrue(tf.is_deleted)

    def test_tag_letters(self) -> None:
        self.assertEqual(FileTag("A"), FileTag.ADDED)
        self.assertEqual(FileTag("M"), FileTag.MODIFIED)
        self.assertEqual(FileTag("D"), FileTag.DELETED)


class TestRemoteModels(unittest.TestCase):
    def test_full_path_at_root_and_below(self) -> None:
        root = RemoteFolder(id="R", name="ROOT", id_path=["R"])
        sub = RemoteFolder(id="S", name="b", full_path="a/b", id_path=["R", "A", "S"])

        self.assertTrue(root.is_root)
        self.assertFalse(sub.is_root)
        self.assertEqual(RemoteFile(id="1", name="x.txt", folder=root).full_path, "x.txt")
        self.assertEqual(RemoteFile(id="2", name="x.txt", folder=sub).full_path, "a/b/x.txt")

    def test_fingerprint_and_defaults(self) -> None:
        root = RemoteFolder(id="R", name="ROOT")
        f = RemoteFile(id="1", name="x", folder=root, properties={FINGERPRINT_PROPERTY: "abc"})
        self.assertEqual(f.fingerprint, "abc")
        self.assertEqual(f.web_view_link, BAD_LINK)
        self.assertIsNone(RemoteFile(id="2", name="y", folder=root).fingerprint)

    def test_identity_equality(self) -> None:
        root = RemoteFolder(id="R", name="ROOT")
        a = RemoteFile(id="1", name="x", folder=root)
        b = RemoteFile(id="1", name="x", folder=root)
        self.assertNotEqual(a, b)


if __name__ == "__main__":
    unittest.main()
