import unittest
from pathlib import Path

from rename_images.output_paths import find_owning_root, get_output_dir, get_output_path


class TestOutputPaths(unittest.TestCase):
    def test_output_dir_is_sibling(self):
        self.assertEqual(get_output_dir(Path("/data/photos")), Path("/data/photos-output"))
        self.assertEqual(get_output_dir(Path("/root")), Path("/root-output"))

    def test_output_dir_for_filesystem_root(self):
        self.assertEqual(get_output_dir(Path("/")), Path("/-output"))

    def test_nested_file(self):
        dest = get_output_path(Path("/root/a/b.png"), Path("/root"), "new.png")
        self.assertEqual(dest, Path("/root-output/a/new.png"))

    def test_file_directly_under_root(self):
        dest = get_output_path(Path("/root/b.png"), Path("/root"), "new.png")
        self.assertEqual(dest, Path("/root-output/new.png"))

    def test_file_outside_root(self):
        self.assertIsNone(get_output_path(Path("/other/b.png"), Path("/root"), "new.png"))

    def test_prefix_match_is_by_component(self):
        # "/photos2" is not under "/photos"
        self.assertIsNone(get_output_path(Path("/photos2/a.png"), Path("/photos"), "a.png"))
        self.assertIsNone(find_owning_root(Path("/photos2/a.png"), [Path("/photos")]))


class TestFindOwningRoot(unittest.TestCase):
    def test_single_root(self):
        roots = [Path("/a"), Path("/b")]
        self.assertEqual(find_owning_root(Path("/b/x/y.png"), roots), Path("/b"))

    def test_no_root(self):
        self.assertIsNone(find_owning_root(Path("/c/y.png"), [Path("/a"), Path("/b")]))

    def test_shallowest_root_wins(self):
        file_path = Path("/p/sub/x.png")
        self.assertEqual(find_owning_root(file_path, [Path("/p"), Path("/p/sub")]), Path("/p"))
        self.assertEqual(find_owning_root(file_path, [Path("/p/sub"), Path("/p")]), Path("/p"))

    def test_nested_root_output_is_outside_every_root(self):
        roots = [Path("/p"), Path("/p/sub")]
        file_path = Path("/p/sub/x.png")
        dest = get_output_path(file_path, find_owning_root(file_path, roots), "x.png")
        self.assertEqual(dest, Path("/p-output/sub/x.png"))
        self.assertIsNone(find_owning_root(dest, roots))


if __name__ == '__main__':
    unittest.main()
