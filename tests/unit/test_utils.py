import tempfile
import unittest
from pathlib import Path

from rename_images.utils import write_bytes_atomic, write_text_atomic


class TestAtomicWrite(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_write_and_overwrite(self):
        target = self.tmp / "a.png"
        write_bytes_atomic(target, b"first")
        write_bytes_atomic(target, b"second")
        self.assertEqual(target.read_bytes(), b"second")
        self.assertEqual([p.name for p in self.tmp.iterdir()], ["a.png"])

    def test_long_destination_name(self):
        # 250 characters is a legal name on common filesystems (limit 255)
        target = self.tmp / ("n" * 246 + ".png")
        write_bytes_atomic(target, b"data")
        self.assertEqual(target.read_bytes(), b"data")
        self.assertEqual([p.name for p in self.tmp.iterdir()], [target.name])

    def test_missing_directory_raises(self):
        with self.assertRaises(OSError):
            write_bytes_atomic(self.tmp / "missing" / "a.png", b"data")
        self.assertFalse((self.tmp / "missing").exists())

    def test_text_variant(self):
        target = self.tmp / "order.txt"
        write_text_atomic(target, "é\n")
        self.assertEqual(target.read_text(encoding='utf-8'), "é\n")


if __name__ == '__main__':
    unittest.main()
