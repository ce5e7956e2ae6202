import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from perfdash_core.config import AppConfig, load_config, save_config


class ConfigTests(unittest.TestCase):
    def test_load_default_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "missing.json"
            cfg = load_config(path)
            self.assertIsInstance(cfg, AppConfig)
            self.assertEqual(cfg.sampling.interval_ms, 1000)
            self.assertEqual(cfg.sampling.history_size, 60)
            self.assertEqual(cfg.gpu.usage_source, "synthetic")

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            cfg = load_config(path)
            cfg.sampling.interval_ms = 500
            cfg.gpu.seed = 42
            cfg.recording.export_dir = "/tmp/exports"
            save_config(cfg, path)
            reloaded = load_config(path)
            self.assertEqual(reloaded.sampling.interval_ms, 500)
            self.assertEqual(reloaded.gpu.seed, 42)
            self.assertEqual(reloaded.recording.export_dir, "/tmp/exports")

    def test_corrupt_file_falls_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_config(path), AppConfig())

    def test_normalizes_out_of_range_values(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            raw = {
                "sampling": {"interval_ms": 5, "history_size": 0, "bogus": 1},
                "recording": {"max_records": -3},
                "gpu": {"usage_source": "magic"},
            }
            path.write_text(json.dumps(raw), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.sampling.interval_ms, 100)
            self.assertEqual(cfg.sampling.history_size, 1)
            self.assertEqual(cfg.recording.max_records, 1)
            self.assertEqual(cfg.gpu.usage_source, "synthetic")
            self.assertFalse(hasattr(cfg.sampling, "bogus"))


if __name__ == "__main__":
    unittest.main()
