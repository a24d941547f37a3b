import os
import shutil
import tempfile
import unittest

from substrate import FileSubstrate, MemorySubstrate, SubstrateError, SubstrateQuotaError


class TestMemorySubstrate(unittest.TestCase):
    def test_get_set_remove(self):
        substrate = MemorySubstrate()
        self.assertIsNone(substrate.get("posts"))
        substrate.set("posts", "[]")
        self.assertEqual(substrate.get("posts"), "[]")
        substrate.remove("posts")
        self.assertIsNone(substrate.get("posts"))
        # removing twice is fine
        substrate.remove("posts")

    def test_values_must_be_strings(self):
        with self.assertRaises(SubstrateError):
            MemorySubstrate().set("posts", [])

    def test_quota(self):
        substrate = MemorySubstrate(quota_bytes=20)
        substrate.set("users", "[]")
        with self.assertRaises(SubstrateQuotaError):
            substrate.set("posts", "x" * 50)
        self.assertIsNone(substrate.get("posts"))

    def test_overwrite_counts_new_value_only(self):
        substrate = MemorySubstrate(quota_bytes=20)
        substrate.set("posts", "x" * 10)
        substrate.set("posts", "y" * 12)
        self.assertEqual(substrate.get("posts"), "y" * 12)


class TestFileSubstrate(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_round_trip_on_disk(self):
        substrate = FileSubstrate(self.test_dir)
        substrate.set("users", '[{"id": "1"}]')

        reopened = FileSubstrate(self.test_dir)
        self.assertEqual(reopened.get("users"), '[{"id": "1"}]')
        self.assertEqual(reopened.keys(), ["users"])
        self.assertFalse(os.path.exists(os.path.join(self.test_dir, "users.json.tmp")))

    def test_remove(self):
        substrate = FileSubstrate(self.test_dir)
        substrate.set("currentUser", "{}")
        substrate.remove("currentUser")
        substrate.remove("currentUser")
        self.assertIsNone(substrate.get("currentUser"))

    def test_rejects_path_like_keys(self):
        substrate = FileSubstrate(self.test_dir)
        with self.assertRaises(SubstrateError):
            substrate.set(os.path.join("..", "escape"), "x")

    def test_unreadable_file_raises_substrate_error(self):
        with open(os.path.join(self.test_dir, "posts.json"), "wb") as f:
            f.write(b"\xff\xfe\x00")
        substrate = FileSubstrate(self.test_dir)
        with self.assertRaises(SubstrateError):
            substrate.get("posts")

    def test_quota_leaves_previous_value(self):
        substrate = FileSubstrate(self.test_dir, quota_bytes=30)
        substrate.set("posts", "[]")
        with self.assertRaises(SubstrateQuotaError):
            substrate.set("posts", "z" * 100)
        self.assertEqual(substrate.get("posts"), "[]")


if __name__ == "__main__":
    unittest.main()
