import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from perfdash_core.history import HistoryBuffer


class HistoryBufferTests(unittest.TestCase):
    def test_unknown_key_is_empty(self):
        buf = HistoryBuffer()
        self.assertEqual(buf.get("cpu"), [])
        self.assertIsNone(buf.latest("cpu"))
        self.assertNotIn("cpu", buf)

    def test_keeps_most_recent_sixty_in_push_order(self):
        buf = HistoryBuffer()
        for i in range(150):
            buf.push("cpu", float(i))
            self.assertLessEqual(len(buf.get("cpu")), 60)
        self.assertEqual(buf.get("cpu"), [float(i) for i in range(90, 150)])
        self.assertEqual(buf.latest("cpu"), 149.0)

    def test_short_series_is_not_padded(self):
        buf = HistoryBuffer()
        buf.push("mem", 1.5)
        buf.push("mem", 2.5)
        self.assertEqual(buf.get("mem"), [1.5, 2.5])

    def test_series_are_independent_and_lazy(self):
        buf = HistoryBuffer(capacity=3)
        buf.push("net.rx", 1)
        buf.push("gpu.Intel", 10)
        buf.push("net.rx", 2)
        self.assertEqual(buf.keys(), ["net.rx", "gpu.Intel"])
        self.assertEqual(buf.get("net.rx"), [1.0, 2.0])
        self.assertEqual(buf.get("gpu.Intel"), [10.0])
        self.assertEqual(len(buf), 2)

    def test_get_returns_copy(self):
        buf = HistoryBuffer()
        buf.push("cpu", 1)
        buf.get("cpu").append(99.0)
        self.assertEqual(buf.get("cpu"), [1.0])

    def test_capacity_must_be_positive(self):
        with self.assertRaises(ValueError):
            HistoryBuffer(capacity=0)


if __name__ == "__main__":
    unittest.main()
