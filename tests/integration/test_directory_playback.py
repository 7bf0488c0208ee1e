import io
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

import cv2
import numpy as np

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "src"))

from ascii_player import main


class DirectoryPlaybackTests(unittest.TestCase):
    def run_main(self, argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_corrupt_entry_is_skipped(self):
        with tempfile.TemporaryDirectory() as tmp:
            pics = Path(tmp)
            cv2.imwrite(str(pics / "01.png"), np.zeros((4, 5, 3), dtype=np.uint8))
            cv2.imwrite(str(pics / "02.jpg"), np.full((4, 5, 3), 255, dtype=np.uint8))
            (pics / "03.jpg").write_bytes(b"\xff\xd8 truncated jpeg")
            (pics / "subdir").mkdir()

            code, out, err = self.run_main([str(pics), "--frame-rate", "500", "--stats"])

            self.assertEqual(code, 0)
            lines = out.splitlines()
            self.assertEqual(len(lines), 8)
            self.assertTrue(all(len(line) == 5 for line in lines))
            self.assertEqual(lines[:4], ["     "] * 4)
            self.assertIn("Frames printed: 2", err)
            self.assertIn("Entries skipped: 1", err)

    def test_unreadable_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            code, out, err = self.run_main([str(Path(tmp) / "missing")])
        self.assertEqual(code, 0)
        self.assertEqual(out, "")
        self.assertIn("Error reading directory:", err)

    def test_font_size_downsamples(self):
        with tempfile.TemporaryDirectory() as tmp:
            cv2.imwrite(str(Path(tmp) / "frame.png"), np.zeros((9, 10, 3), dtype=np.uint8))
            code, out, err = self.run_main([tmp, "-f", "4", "-r", "500"])
        self.assertEqual(out, "   \n   \n   \n")


if __name__ == "__main__":
    unittest.main()
