"""GPU utilization sources.

No portable API reports per-controller utilization, so the sampler asks a
pluggable source instead. ``SyntheticGpuUsageSource`` produces seeded random
values for demos and tests; ``NvmlGpuUsageSource`` reads real utilization for
NVIDIA devices through NVML.
"""

from __future__ import annotations

import random
from typing import Protocol

from .models import GpuController


class GpuUsageSource(Protocol):
    def usage(self, controller: GpuController, index: int) -> float: ...


class SyntheticGpuUsageSource:
    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def usage(self, controller: GpuController, index: int) -> float:
        return self._rng.uniform(0.0, 100.0)


class NvmlGpuUsageSource:
    """Utilization percent by NVML device index.

    Controllers must be listed in NVML order, which is what
    ``PsutilMetricsProvider`` reports.
    """

    def __init__(self) -> None:
        import pynvml  # type: ignore

        self._nvml = pynvml
        pynvml.nvmlInit()

    def usage(self, controller: GpuController, index: int) -> float:
        nvml = self._nvml
        h = nvml.nvmlDeviceGetHandleByIndex(index)
        return float(nvml.nvmlDeviceGetUtilizationRates(h).gpu)


def build_gpu_usage_source(kind: str = "synthetic", seed: int | None = None) -> GpuUsageSource:
    if kind == "nvml":
        return NvmlGpuUsageSource()
    if kind == "synthetic":
        return SyntheticGpuUsageSource(seed=seed)
    raise ValueError(f"unknown gpu usage source: {kind}")
