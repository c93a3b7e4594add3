import json
import tempfile
import unittest
from pathlib import Path

from app.yeargrid.errors import ManifestError
from app.yeargrid.manifest.store import ManifestStore, load_manifest, manifest_fingerprint


class TestLoadManifest(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "manifest.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_valid(self) -> None:
        self.path.write_text(json.dumps({"1": ["a.jpg", "b.jpg"]}), encoding="utf-8")
        self.assertEqual(load_manifest(self.path), {"1": ["a.jpg", "b.jpg"]})

    def test_missing(self) -> None:
        with self.assertRaises(ManifestError):
            load_manifest(self.path)

    def test_invalid_json(self) -> None:
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(ManifestError):
            load_manifest(self.path)

    def test_wrong_shape(self) -> None:
        for bad in ([], {"1": "a.jpg"}, {"1": [1, 2]}):
            self.path.write_text(json.dumps(bad), encoding="utf-8")
            with self.assertRaises(ManifestError):
                load_manifest(self.path)


class TestFingerprint(unittest.TestCase):
    def test_key_order_irrelevant_item_order_relevant(self) -> None:
        a = manifest_fingerprint({"1": ["a", "b"], "2": ["c"]})
        b = manifest_fingerprint({"2": ["c"], "1": ["a", "b"]})
        c = manifest_fingerprint({"1": ["b", "a"], "2": ["c"]})
        self.assertEqual(a, b)
        self.assertNotEqual(a, c)


class TestManifestStore(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "manifest.json"
        self.store = ManifestStore(self.path)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def write(self, data) -> None:
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def test_refresh_reports_changes(self) -> None:
        self.write({"2": ["b.jpg"], "1": ["a.jpg"]})
        self.assertTrue(self.store.refresh())
        self.assertFalse(self.store.refresh())
        self.assertEqual(self.store.groups(), ["1", "2"])

        self.write({"1": ["a.jpg", "c.jpg"], "2": ["b.jpg"]})
        self.assertTrue(self.store.refresh())
        self.assertEqual(self.store.group("1"), ["a.jpg", "c.jpg"])

    def test_refresh_keeps_last_manifest_when_unreadable(self) -> None:
        self.write({"1": ["a.jpg"]})
        self.store.load()
        self.path.write_text("{", encoding="utf-8")
        self.assertFalse(self.store.refresh())
        self.assertEqual(self.store.manifest, {"1": ["a.jpg"]})

    def test_load_propagates_errors(self) -> None:
        with self.assertRaises(ManifestError):
            self.store.load()

    def test_unknown_group_is_empty(self) -> None:
        self.write({"1": ["a.jpg"]})
        self.store.load()
        self.assertEqual(self.store.group("9"), [])


if __name__ == "__main__":
    unittest.main()
