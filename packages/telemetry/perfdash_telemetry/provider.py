"""Metrics provider protocol and the psutil-backed implementation."""

from __future__ import annotations

import asyncio
import platform
from pathlib import Path
from typing import Protocol

import psutil

from .models import (
    CpuLoad,
    CpuSpeed,
    CpuStaticInfo,
    GpuController,
    GraphicsInfo,
    MemInfo,
    NetworkInterfaceStats,
)


_VENDOR_NAMES = {
    "GenuineIntel": "Intel",
    "AuthenticAMD": "AMD",
}


class MetricsProvider(Protocol):
    """Async source of raw readings. Every call may raise."""

    async def get_cpu_static_info(self) -> CpuStaticInfo: ...

    async def get_cpu_current_load(self) -> CpuLoad: ...

    async def get_cpu_speed(self) -> CpuSpeed: ...

    async def get_mem_info(self) -> MemInfo: ...

    async def get_graphics_info(self) -> GraphicsInfo: ...

    async def get_network_info(self) -> list[NetworkInterfaceStats]: ...


class _GpuAdapter:
    def controllers(self) -> tuple[GpuController, ...]:
        return ()


class _NvmlGpuAdapter(_GpuAdapter):
    def __init__(self) -> None:
        import pynvml  # type: ignore

        self._nvml = pynvml
        pynvml.nvmlInit()

    def controllers(self) -> tuple[GpuController, ...]:
        nvml = self._nvml
        out = []
        for idx in range(nvml.nvmlDeviceGetCount()):
            h = nvml.nvmlDeviceGetHandleByIndex(idx)
            name = nvml.nvmlDeviceGetName(h)
            if isinstance(name, bytes):
                name = name.decode("utf-8", errors="replace")
            mem = nvml.nvmlDeviceGetMemoryInfo(h)
            out.append(GpuController(model=str(name), vendor="NVIDIA", vram_mb=int(mem.total) // (1024 * 1024)))
        return tuple(out)


def _build_gpu_adapter() -> _GpuAdapter:
    try:
        return _NvmlGpuAdapter()
    except Exception:
        return _GpuAdapter()


def _read_proc_cpuinfo(path: Path = Path("/proc/cpuinfo")) -> tuple[str, str]:
    vendor = ""
    brand = ""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return vendor, brand

    for line in text.splitlines():
        key, _sep, value = line.partition(":")
        key = key.strip()
        if key == "vendor_id" and not vendor:
            vendor = value.strip()
        elif key == "model name" and not brand:
            brand = value.strip()
        if vendor and brand:
            break
    return vendor, brand


def _cpu_identity() -> tuple[str, str]:
    vendor, brand = ("", "")
    if platform.system() == "Linux":
        vendor, brand = _read_proc_cpuinfo()
    if not brand:
        brand = platform.processor() or platform.machine()
    manufacturer = _VENDOR_NAMES.get(vendor, vendor)
    # /proc/cpuinfo brand strings already start with the vendor name.
    if manufacturer and brand.startswith(manufacturer + " "):
        brand = brand[len(manufacturer):].strip()
    return manufacturer, brand


def _default_interface(counters: dict, stats: dict) -> str | None:
    best = None
    best_total = -1
    for name, io in counters.items():
        st = stats.get(name)
        if st is None or not st.isup or name.startswith("lo"):
            continue
        total = io.bytes_recv + io.bytes_sent
        if total > best_total:
            best = name
            best_total = total
    return best


class PsutilMetricsProvider:
    """Provider backed by psutil, with NVML for GPU controllers when available."""

    def __init__(self) -> None:
        # Prime non-blocking CPU measurement.
        psutil.cpu_percent(interval=None)
        self._gpu = _build_gpu_adapter()

    async def get_cpu_static_info(self) -> CpuStaticInfo:
        return await asyncio.to_thread(self._cpu_static_info)

    async def get_cpu_current_load(self) -> CpuLoad:
        return CpuLoad(current_load_percent=float(await asyncio.to_thread(psutil.cpu_percent, None)))

    async def get_cpu_speed(self) -> CpuSpeed:
        freq = await asyncio.to_thread(psutil.cpu_freq)
        return CpuSpeed(avg_ghz=(float(freq.current) / 1000.0 if freq else 0.0))

    async def get_mem_info(self) -> MemInfo:
        vm = await asyncio.to_thread(psutil.virtual_memory)
        return MemInfo(total_bytes=int(vm.total), used_bytes=int(vm.used), free_bytes=int(vm.free))

    async def get_graphics_info(self) -> GraphicsInfo:
        return GraphicsInfo(controllers=await asyncio.to_thread(self._gpu.controllers))

    async def get_network_info(self) -> list[NetworkInterfaceStats]:
        return await asyncio.to_thread(self._network_info)

    def _cpu_static_info(self) -> CpuStaticInfo:
        manufacturer, brand = _cpu_identity()
        freq = psutil.cpu_freq()
        speed = 0.0
        if freq:
            speed = float(freq.max or freq.current) / 1000.0
        cores = psutil.cpu_count(logical=False) or psutil.cpu_count(logical=True) or 0
        return CpuStaticInfo(manufacturer=manufacturer, brand=brand, speed_ghz=speed, cores=int(cores))

    def _network_info(self) -> list[NetworkInterfaceStats]:
        counters = psutil.net_io_counters(pernic=True)
        stats = psutil.net_if_stats()
        default = _default_interface(counters, stats)
        out = []
        for name, io in counters.items():
            st = stats.get(name)
            out.append(
                NetworkInterfaceStats(
                    interface_name=name,
                    rx_bytes=int(io.bytes_recv),
                    tx_bytes=int(io.bytes_sent),
                    is_up=bool(st.isup) if st is not None else False,
                    is_default=(name == default),
                )
            )
        return out
