import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "src"))

from ascii_converter import brightness_to_ascii
from charsets import ASCII_RAMP


class BrightnessToAsciiTests(unittest.TestCase):
    def test_extremes(self):
        self.assertEqual(brightness_to_ascii(0), " ")
        self.assertEqual(brightness_to_ascii(255), "@")

    def test_monotonic_over_full_range(self):
        last = -1
        for b in range(256):
            index = ASCII_RAMP.index(brightness_to_ascii(b))
            self.assertGreaterEqual(index, last)
            last = index

    def test_clamps_out_of_range(self):
        self.assertEqual(brightness_to_ascii(-5), brightness_to_ascii(0))
        self.assertEqual(brightness_to_ascii(300), brightness_to_ascii(255))

    def test_integer_bucket_edges(self):
        # index = b * 9 // 255
        self.assertEqual(brightness_to_ascii(28), " ")
        self.assertEqual(brightness_to_ascii(29), ".")
        self.assertEqual(brightness_to_ascii(254), "%")


if __name__ == "__main__":
    unittest.main()
