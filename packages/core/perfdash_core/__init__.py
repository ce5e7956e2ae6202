"""Metrics acquisition core: sampling, rate computation, history windows, and recording."""

from .config import AppConfig, load_config, save_config
from .errors import EmptyExportError, FetchFailure, PerfDashError, RecordingActiveError
from .gpu_keys import gpu_series_key, resolve_gpu_key
from .history import HistoryBuffer
from .rates import compute_rates
from .recorder import Record, Recorder, RecorderState, format_network_speed, render_csv
from .scheduler import PeriodicTask
from .sampler import Reading, Sampler, SamplerState

__all__ = [
    "AppConfig",
    "EmptyExportError",
    "FetchFailure",
    "HistoryBuffer",
    "PerfDashError",
    "PeriodicTask",
    "Reading",
    "Record",
    "Recorder",
    "RecorderState",
    "RecordingActiveError",
    "Sampler",
    "SamplerState",
    "compute_rates",
    "format_network_speed",
    "gpu_series_key",
    "load_config",
    "render_csv",
    "resolve_gpu_key",
    "save_config",
]
