import tempfile
import unittest
from pathlib import Path

from services.storage import LocalObjectStorage, StorageError


class TestLocalObjectStorage(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.storage = LocalObjectStorage(self.root, "http://cdn.test/files/")

    def tearDown(self):
        self._tmp.cleanup()

    async def test_upload_and_delete(self):
        stored = await self.storage.upload("reviews/rev-1/1_0_a.png", b"abc", "image/png")
        self.assertEqual(stored.url, "http://cdn.test/files/reviews/rev-1/1_0_a.png")
        self.assertEqual(stored.size, 3)
        self.assertEqual((self.root / "reviews/rev-1/1_0_a.png").read_bytes(), b"abc")

        self.assertTrue(await self.storage.delete("reviews/rev-1/1_0_a.png"))
        self.assertFalse(await self.storage.delete("reviews/rev-1/1_0_a.png"))

    async def test_keys_cannot_escape_root(self):
        with self.assertRaises(StorageError):
            await self.storage.upload("../outside.txt", b"x")
        with self.assertRaises(StorageError):
            await self.storage.delete("/etc/passwd")


if __name__ == "__main__":
    unittest.main()
