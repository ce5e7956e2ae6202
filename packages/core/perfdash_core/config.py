"""Persistent app settings schema and load/save helpers."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from .logging_setup import config_root


CONFIG_VERSION = 1
GPU_USAGE_SOURCES = ("synthetic", "nvml")


@dataclass
class SamplingConfig:
    interval_ms: int = 1000
    history_size: int = 60


@dataclass
class RecordingConfig:
    max_records: int = 86400
    export_dir: str | None = None


@dataclass
class GpuConfig:
    usage_source: str = "synthetic"
    seed: int | None = None


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    recording: RecordingConfig = field(default_factory=RecordingConfig)
    gpu: GpuConfig = field(default_factory=GpuConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_sampling(cfg: AppConfig) -> None:
    cfg.sampling.interval_ms = max(100, min(60000, int(cfg.sampling.interval_ms)))
    cfg.sampling.history_size = max(1, min(3600, int(cfg.sampling.history_size)))


def _normalize_recording(cfg: AppConfig) -> None:
    cfg.recording.max_records = max(1, int(cfg.recording.max_records))


def _normalize_gpu(cfg: AppConfig) -> None:
    if cfg.gpu.usage_source not in GPU_USAGE_SOURCES:
        cfg.gpu.usage_source = "synthetic"
    if cfg.gpu.seed is not None:
        cfg.gpu.seed = int(cfg.gpu.seed)


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return AppConfig()

    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        sampling=_merge(SamplingConfig, data.get("sampling", {})),
        recording=_merge(RecordingConfig, data.get("recording", {})),
        gpu=_merge(GpuConfig, data.get("gpu", {})),
        diagnostics=_merge(DiagnosticsConfig, data.get("diagnostics", {})),
    )

    _normalize_sampling(cfg)
    _normalize_recording(cfg)
    _normalize_gpu(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
