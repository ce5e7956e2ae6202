"""System telemetry providers for PerfDash."""

from .gpu_usage import GpuUsageSource, NvmlGpuUsageSource, SyntheticGpuUsageSource, build_gpu_usage_source
from .models import (
    CpuLoad,
    CpuSpeed,
    CpuStaticInfo,
    GpuController,
    GraphicsInfo,
    MemInfo,
    NetworkInterfaceStats,
    Snapshot,
)

try:  # pragma: no cover - optional at import time for minimal test environments
    from .provider import MetricsProvider, PsutilMetricsProvider
except Exception:  # pragma: no cover
    MetricsProvider = None  # type: ignore[assignment]
    PsutilMetricsProvider = None  # type: ignore[assignment]

__all__ = [
    "CpuLoad",
    "CpuSpeed",
    "CpuStaticInfo",
    "GpuController",
    "GpuUsageSource",
    "GraphicsInfo",
    "MemInfo",
    "NetworkInterfaceStats",
    "NvmlGpuUsageSource",
    "Snapshot",
    "SyntheticGpuUsageSource",
    "build_gpu_usage_source",
]

if PsutilMetricsProvider is not None:
    __all__ += ["MetricsProvider", "PsutilMetricsProvider"]
