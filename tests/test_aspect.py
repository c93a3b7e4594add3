import tempfile
import unittest
from pathlib import Path

from PIL import Image

from app.yeargrid.media.aspect import AspectRatioSource


class TestAspectRatioSource(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        (self.root / "1").mkdir()
        Image.new("RGB", (300, 200)).save(self.root / "1" / "wide.png")
        Image.new("RGB", (50, 100)).save(self.root / "1" / "tall.jpg")
        (self.root / "1" / "broken.jpg").write_text("not an image", encoding="utf-8")
        self.source = AspectRatioSource(self.root)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_reads_header_dimensions(self) -> None:
        self.assertAlmostEqual(self.source.ratio("1", "wide.png"), 1.5)
        self.assertAlmostEqual(self.source.ratio("1", "tall.jpg"), 0.5)
        self.assertTrue(self.source.is_known("1", "wide.png"))

    def test_default_for_missing_or_broken(self) -> None:
        self.assertEqual(self.source.ratio("1", "missing.jpg"), 1.2)
        self.assertEqual(self.source.ratio("1", "broken.jpg"), 1.2)
        self.assertFalse(self.source.is_known("1", "broken.jpg"))

    def test_unknown_becomes_known_once_file_arrives(self) -> None:
        self.assertEqual(self.source.ratio("1", "late.png"), 1.2)
        Image.new("RGB", (40, 20)).save(self.root / "1" / "late.png")
        self.assertAlmostEqual(self.source.ratio("1", "late.png"), 2.0)

    def test_ratios_in_order(self) -> None:
        ratios = self.source.ratios("1", ["tall.jpg", "missing.png", "wide.png"])
        self.assertEqual([round(r, 3) for r in ratios], [0.5, 1.2, 1.5])

    def test_forget_clears_cache(self) -> None:
        self.source.ratio("1", "wide.png")
        self.source.forget()
        self.assertFalse(self.source.is_known("1", "wide.png"))

    def test_invalid_default(self) -> None:
        with self.assertRaises(ValueError):
            AspectRatioSource(self.root, default=0)


if __name__ == "__main__":
    unittest.main()
