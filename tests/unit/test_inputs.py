import tempfile
import unittest
from pathlib import Path

from rename_images.config import AppHome
from rename_images.inputs import add_from_glob, inputs_file_path, load_inputs, remove_from_glob


class TestInputs(unittest.TestCase):
    def setUp(self):
        self._home = tempfile.TemporaryDirectory()
        self._data = tempfile.TemporaryDirectory()
        self.home = AppHome(Path(self._home.name))
        self.data = Path(self._data.name).resolve()
        for name in ("beta", "alpha", "gamma"):
            (self.data / name).mkdir()

    def tearDown(self):
        self._home.cleanup()
        self._data.cleanup()

    def test_empty(self):
        self.assertEqual(load_inputs(self.home), [])

    def test_add_glob(self):
        added = add_from_glob(self.home, str(self.data / "*a"))
        expected = [self.data / "alpha", self.data / "beta", self.data / "gamma"]
        self.assertEqual(added, expected)
        self.assertEqual(load_inputs(self.home), expected)

    def test_add_is_idempotent(self):
        add_from_glob(self.home, str(self.data / "alpha"))
        self.assertEqual(add_from_glob(self.home, str(self.data / "alpha")), [])
        self.assertEqual(load_inputs(self.home), [self.data / "alpha"])

    def test_stored_sorted_and_unique(self):
        add_from_glob(self.home, str(self.data / "gamma"))
        add_from_glob(self.home, str(self.data / "alpha"))
        lines = inputs_file_path(self.home).read_text(encoding='utf-8').splitlines()
        self.assertEqual(lines, [str(self.data / "alpha"), str(self.data / "gamma")])

    def test_no_match_is_not_an_error(self):
        self.assertEqual(add_from_glob(self.home, str(self.data / "nothing-*")), [])
        self.assertEqual(remove_from_glob(self.home, str(self.data / "nothing-*")), [])

    def test_paths_are_canonical(self):
        add_from_glob(self.home, str(self.data / "alpha" / ".." / "beta"))
        self.assertEqual(load_inputs(self.home), [self.data / "beta"])

    def test_remove(self):
        add_from_glob(self.home, str(self.data / "*"))
        removed = remove_from_glob(self.home, str(self.data / "[ab]*"))
        self.assertEqual(removed, [self.data / "alpha", self.data / "beta"])
        self.assertEqual(load_inputs(self.home), [self.data / "gamma"])

    def test_remove_root_that_no_longer_exists(self):
        add_from_glob(self.home, str(self.data / "gamma"))
        (self.data / "gamma").rmdir()
        self.assertEqual(remove_from_glob(self.home, str(self.data / "gamma")), [self.data / "gamma"])
        self.assertEqual(load_inputs(self.home), [])


if __name__ == '__main__':
    unittest.main()
