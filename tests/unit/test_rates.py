import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from perfdash_core.rates import bytes_to_mb, compute_rates


class RateTests(unittest.TestCase):
    def test_rate_is_delta_over_elapsed(self):
        rates = compute_rates({"net.rx": 1000}, {"net.rx": 3000}, 2)
        self.assertEqual(rates, {"net.rx": 1000.0})

    def test_zero_elapsed_emits_nothing(self):
        self.assertEqual(compute_rates({"net.rx": 1000}, {"net.rx": 3000}, 0), {})
        self.assertEqual(compute_rates({"net.rx": 1000}, {"net.rx": 3000}, -0.5), {})

    def test_only_keys_in_both_maps(self):
        rates = compute_rates({"net.rx": 0, "net.rx.eth0": 0}, {"net.rx": 10, "net.rx.wlan0": 5}, 1)
        self.assertEqual(rates, {"net.rx": 10.0})

    def test_counter_reset_passes_through_negative(self):
        rates = compute_rates({"net.tx": 5000}, {"net.tx": 1000}, 1)
        self.assertEqual(rates["net.tx"], -4000.0)

    def test_bytes_to_mb(self):
        self.assertEqual(bytes_to_mb(1048576), 1.0)


if __name__ == "__main__":
    unittest.main()
