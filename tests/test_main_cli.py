import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from app.yeargrid.main import main


class TestMainCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.images = root / "images"
        self.manifest_path = root / "manifest.json"
        for name in ("a.jpg", "b.jpg", "c.jpg"):
            path = self.images / "1" / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def run_cli(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(list(argv))
        return code, out.getvalue()

    def test_generate(self) -> None:
        code, _ = self.run_cli(
            "generate", "--images-dir", str(self.images), "--manifest", str(self.manifest_path)
        )
        self.assertEqual(code, 0)
        self.assertEqual(
            json.loads(self.manifest_path.read_text(encoding="utf-8")), {"1": ["a.jpg", "b.jpg", "c.jpg"]}
        )

    def test_generate_missing_dir_fails(self) -> None:
        code, _ = self.run_cli(
            "generate", "--images-dir", str(self.images / "nope"), "--manifest", str(self.manifest_path)
        )
        self.assertEqual(code, 1)

    def test_layout_reports_columns(self) -> None:
        self.run_cli("generate", "--images-dir", str(self.images), "--manifest", str(self.manifest_path))
        code, out = self.run_cli(
            "layout",
            "--manifest", str(self.manifest_path),
            "--images-dir", str(self.images),
            "--group", "1",
            "--width", "1200",
            "--height", "800",
        )
        self.assertEqual(code, 0)
        self.assertIn("YEAR 1 - 2016", out)
        self.assertIn("columns=8", out)
        self.assertIn("max_column_height=", out)
        self.assertIn("items=3", out)

    def test_layout_zero_width_is_noop(self) -> None:
        self.run_cli("generate", "--images-dir", str(self.images), "--manifest", str(self.manifest_path))
        code, out = self.run_cli(
            "layout", "--manifest", str(self.manifest_path), "--width", "0", "--height", "800"
        )
        self.assertEqual(code, 0)
        self.assertIn("No layout", out)

    def test_layout_without_manifest_fails(self) -> None:
        code, _ = self.run_cli("layout", "--manifest", str(self.manifest_path), "--width", "10", "--height", "10")
        self.assertEqual(code, 1)

    def test_layout_invalid_params(self) -> None:
        self.run_cli("generate", "--images-dir", str(self.images), "--manifest", str(self.manifest_path))
        code, _ = self.run_cli(
            "layout",
            "--manifest", str(self.manifest_path),
            "--width", "100",
            "--height", "100",
            "--min-columns", "5",
            "--max-columns", "2",
        )
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
