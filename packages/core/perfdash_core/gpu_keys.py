"""Stable identity strings for GPU controllers."""

from __future__ import annotations

from perfdash_telemetry.models import GpuController


def resolve_gpu_key(controller: GpuController, index: int) -> str:
    """Model name, else vendor, else a positional ``gpu<index>`` fallback.

    Controllers sharing a model (or vendor, when the model is empty) resolve to
    the same key. Positional keys are only stable if the provider lists
    controllers in the same order every tick.
    """
    if controller.model:
        return controller.model
    if controller.vendor:
        return controller.vendor
    return f"gpu{index}"


def gpu_series_key(gpu_key: str) -> str:
    return f"gpu.{gpu_key}"
