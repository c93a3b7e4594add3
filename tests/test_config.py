import json
import tempfile
import unittest
from pathlib import Path

from app.yeargrid.config import AppConfig, JsonSettings, load_config
from app.yeargrid.errors import ConfigError


class TestConfig(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "yeargrid.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def write(self, data) -> None:
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def test_defaults(self) -> None:
        config = load_config()
        self.assertEqual(config, AppConfig())
        self.assertEqual(
            (config.layout.gutter_px, config.layout.min_columns, config.layout.max_columns), (2, 8, 30)
        )
        self.assertEqual(config.slideshow.interval_ms, 2500)
        self.assertEqual(config.viewer.manifest_poll_ms, 2000)

    def test_overrides(self) -> None:
        self.write(
            {
                "layout": {"gutter_px": 4, "max_columns": 12},
                "manifest": {"images_dir": "photos"},
                "unknown": {"ignored": True},
            }
        )
        config = load_config(self.path)
        self.assertEqual(config.layout.gutter_px, 4)
        self.assertEqual(config.layout.min_columns, 8)
        self.assertEqual(config.layout.max_columns, 12)
        self.assertEqual(config.manifest.images_dir, "photos")
        self.assertEqual(config.manifest.manifest_path, "manifest.json")

    def test_invalid_values(self) -> None:
        for bad in (
            {"layout": {"min_columns": 40}},
            {"layout": {"gutter_px": "wide"}},
            {"slideshow": {"interval_ms": -1}},
            {"layout": {"min_columns": 8.7}},
            {"viewer": {"resize_debounce_ms": 99.5}},
            {"manifest": {"images_dir": ""}},
        ):
            self.write(bad)
            with self.assertRaises(ConfigError):
                load_config(self.path)

    def test_whole_float_accepted_for_int_fields(self) -> None:
        self.write({"layout": {"min_columns": 6.0}})
        config = load_config(self.path)
        self.assertEqual(config.layout.min_columns, 6)
        self.assertIsInstance(config.layout.min_columns, int)

    def test_missing_or_malformed_file(self) -> None:
        with self.assertRaises(ConfigError):
            load_config(self.path)
        self.path.write_text("[1, 2]", encoding="utf-8")
        with self.assertRaises(ConfigError):
            load_config(self.path)

    def test_dotted_get(self) -> None:
        settings = JsonSettings({"a": {"b": {"c": 1}}})
        self.assertEqual(settings.get("a.b.c"), 1)
        self.assertEqual(settings.get("a.x", 5), 5)


if __name__ == "__main__":
    unittest.main()
