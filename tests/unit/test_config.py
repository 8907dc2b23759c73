import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from rename_images.config import (
    CONFIG_DIR_ENV,
    DEFAULT_MAX_NAME_LENGTH,
    MAX_NAME_LENGTH_ENV,
    MAX_NAME_LENGTH_FILE,
    AppHome,
    get_user_config_dir,
    load_max_name_length,
    reset_max_name_length,
    set_max_name_length,
)


class TestMaxNameLength(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.home = AppHome(Path(self._tmp.name) / "home")
        self.file = self.home.file_path(MAX_NAME_LENGTH_FILE)
        env = patch.dict(os.environ)
        env.start()
        self.addCleanup(env.stop)
        os.environ.pop(MAX_NAME_LENGTH_ENV, None)

    def tearDown(self):
        self._tmp.cleanup()

    def test_default_written_back(self):
        self.assertEqual(load_max_name_length(self.home), DEFAULT_MAX_NAME_LENGTH)
        self.assertEqual(self.file.read_text(encoding='utf-8').strip(), "50")

    def test_file_value(self):
        set_max_name_length(self.home, 60)
        self.assertEqual(load_max_name_length(self.home), 60)

    def test_env_overrides_file_without_touching_it(self):
        os.environ[MAX_NAME_LENGTH_ENV] = "70"
        self.assertEqual(load_max_name_length(self.home), 70)
        self.assertFalse(self.file.exists())

    def test_invalid_env_falls_through(self):
        os.environ[MAX_NAME_LENGTH_ENV] = "lots"
        set_max_name_length(self.home, 33)
        self.assertEqual(load_max_name_length(self.home), 33)

    def test_invalid_file_reset(self):
        self.home.ensure_dir()
        self.file.write_text("junk", encoding='utf-8')
        self.assertEqual(load_max_name_length(self.home), DEFAULT_MAX_NAME_LENGTH)
        self.assertEqual(self.file.read_text(encoding='utf-8').strip(), "50")

    def test_negative_rejected(self):
        with self.assertRaises(ValueError):
            set_max_name_length(self.home, -1)

    def test_reset(self):
        set_max_name_length(self.home, 10)
        self.assertEqual(reset_max_name_length(self.home), DEFAULT_MAX_NAME_LENGTH)
        self.assertEqual(load_max_name_length(self.home), DEFAULT_MAX_NAME_LENGTH)


class TestAppHome(unittest.TestCase):
    def test_env_override(self):
        with patch.dict(os.environ, {CONFIG_DIR_ENV: "/tmp/custom-home"}):
            self.assertEqual(AppHome.resolve().path, Path("/tmp/custom-home"))

    @unittest.skipIf(os.name == "nt", "XDG layout only")
    def test_xdg_config_home(self):
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": "/tmp/xdg"}):
            os.environ.pop(CONFIG_DIR_ENV, None)
            self.assertEqual(get_user_config_dir(), Path("/tmp/xdg/rename-images"))
            self.assertEqual(AppHome.resolve().path, Path("/tmp/xdg/rename-images"))

    def test_file_path(self):
        home = AppHome(Path("/cfg"))
        self.assertEqual(home.file_path("inputs.txt"), Path("/cfg/inputs.txt"))


if __name__ == '__main__':
    unittest.main()
