import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from PIL import Image

from rename_images.__main__ import main
from rename_images.config import AppHome
from rename_images.planning import RuleStore


class TestCli(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name).resolve()
        self.home = self.tmp / "config"
        self.root = self.tmp / "photos"
        self.root.mkdir()

    def tearDown(self):
        self._tmp.cleanup()

    def run_cli(self, *argv) -> int:
        return main(["--config-dir", str(self.home), *argv])

    def _finds(self):
        return [r.find for r in RuleStore(AppHome(self.home)).rules()]

    def test_no_command_prints_help(self):
        self.assertEqual(main([]), 0)

    def test_rule_commands(self):
        self.assertEqual(self.run_cli("rule", "add", "IMG_", "Photo_"), 0)
        self.assertEqual(self.run_cli("rule", "add", r"\s+", "_", "--only-when-too-long"), 0)
        self.assertEqual(self.run_cli("rule", "add", '"x" "y"'), 0)
        self.assertEqual(self._finds(), ["IMG_", r"\s+", "x"])

        self.assertEqual(self.run_cli("rule", "move", "3", "1"), 0)
        self.assertEqual(self._finds(), ["x", "IMG_", r"\s+"])

        self.assertEqual(self.run_cli("rule", "disable", "1"), 0)
        self.assertFalse(RuleStore(AppHome(self.home)).rules()[0].enabled)
        self.assertEqual(self.run_cli("rule", "enable", "1"), 0)
        self.assertTrue(RuleStore(AppHome(self.home)).rules()[0].enabled)

        self.assertEqual(self.run_cli("rule", "remove", "1"), 0)
        self.assertEqual(self._finds(), ["IMG_", r"\s+"])
        self.assertEqual(self.run_cli("rule", "list"), 0)

    def test_rule_index_out_of_range(self):
        self.assertEqual(self.run_cli("rule", "remove", "4"), 1)
        self.assertEqual(self.run_cli("rule", "enable", "4"), 1)
        self.assertEqual(self.run_cli("rule", "move", "4", "1"), 1)

    def test_rule_add_rejects_empty_find(self):
        self.assertEqual(self.run_cli("rule", "add", ""), 1)
        self.assertEqual(self._finds(), [])

    def test_max_name_length(self):
        self.assertEqual(self.run_cli("max-name-length", "set", "12"), 0)
        self.assertEqual((self.home / "max_name_length.txt").read_text(encoding='utf-8').strip(), "12")
        self.assertEqual(self.run_cli("max-name-length", "show"), 0)
        self.assertEqual(self.run_cli("max-name-length", "reset"), 0)
        self.assertEqual((self.home / "max_name_length.txt").read_text(encoding='utf-8').strip(), "50")

    def test_input_commands(self):
        self.assertEqual(self.run_cli("input", "add", str(self.root)), 0)
        self.assertEqual((self.home / "inputs.txt").read_text(encoding='utf-8'), f"{self.root}\n")
        self.assertEqual(self.run_cli("input", "list"), 0)
        self.assertEqual(self.run_cli("input", "remove", str(self.root)), 0)
        self.assertEqual((self.home / "inputs.txt").read_text(encoding='utf-8'), "")

    def test_plan_without_inputs_fails(self):
        self.assertEqual(self.run_cli("plan"), 1)

    def test_plan_and_process(self):
        Image.new("RGB", (30, 30), "white").save(self.root / "IMG_0001 final.png")
        self.run_cli("input", "add", str(self.root))
        self.run_cli("rule", "add", "IMG_", "Photo_")
        self.run_cli("rule", "add", r"\s+", "_")

        plan_out = self.tmp / "plan.json"
        self.assertEqual(self.run_cli("plan", "-o", str(plan_out)), 0)
        plan = json.loads(plan_out.read_text(encoding='utf-8'))
        self.assertEqual(plan["entries"][0]["new_rel"], "Photo_0001_final.png")

        report = self.tmp / "report.json"
        self.assertEqual(self.run_cli("process", "--report-out", str(report)), 0)
        self.assertTrue((self.tmp / "photos-output" / "Photo_0001_final.png").exists())
        self.assertEqual(json.loads(report.read_text(encoding='utf-8'))["processed_count"], 1)

    def test_process_no_rules(self):
        Image.new("RGB", (30, 30), "white").save(self.root / "IMG_1.png")
        self.run_cli("input", "add", str(self.root))
        self.run_cli("rule", "add", "IMG_", "Photo_")
        self.assertEqual(self.run_cli("process", "--no-rules"), 0)
        self.assertTrue((self.tmp / "photos-output" / "IMG_1.png").exists())

    def test_process_reports_failures(self):
        Image.new("RGB", (30, 30), "white").save(self.root / "x.png")
        Image.new("RGB", (30, 30), "white").save(self.root / "y.png")
        self.run_cli("input", "add", str(self.root))
        self.run_cli("rule", "add", "^[xy]", "z")
        self.assertEqual(self.run_cli("process"), 1)
        self.assertFalse((self.tmp / "photos-output" / "z.png").exists())

    def test_process_rejects_bad_quality(self):
        self.assertEqual(self.run_cli("process", "--jpeg-quality", "0"), 1)

    def test_preview(self):
        source = self.root / "square.png"
        img = Image.new("RGB", (100, 100), "white")
        img.paste((0, 0, 0), (40, 40, 50, 50))
        img.save(source)
        self.assertEqual(self.run_cli("preview", str(source), "--crop"), 0)
        self.assertEqual(self.run_cli("preview", str(self.root / "missing.png")), 1)

    def test_preview_reports_decoder_errors(self):
        source = self.root / "huge.png"
        Image.new("RGB", (4, 4), "white").save(source)
        errors = (Image.DecompressionBombError("too many pixels"), ValueError("cannot encode"))
        for err in errors:
            with patch("rename_images.__main__.process_image", side_effect=err):
                self.assertEqual(self.run_cli("preview", str(source)), 1)


if __name__ == '__main__':
    unittest.main()
