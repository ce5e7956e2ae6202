"""Typed raw readings returned by metrics providers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CpuStaticInfo:
    manufacturer: str
    brand: str
    speed_ghz: float
    cores: int

    @property
    def device_name(self) -> str:
        return f"{self.manufacturer} {self.brand}".strip()


@dataclass(frozen=True)
class CpuLoad:
    current_load_percent: float


@dataclass(frozen=True)
class CpuSpeed:
    avg_ghz: float


@dataclass(frozen=True)
class MemInfo:
    total_bytes: int
    used_bytes: int
    free_bytes: int

    @property
    def used_percent(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.used_bytes / self.total_bytes * 100.0


@dataclass(frozen=True)
class GpuController:
    model: str
    vendor: str
    vram_mb: int = 0


@dataclass(frozen=True)
class GraphicsInfo:
    controllers: tuple[GpuController, ...] = ()


@dataclass(frozen=True)
class NetworkInterfaceStats:
    interface_name: str
    rx_bytes: int
    tx_bytes: int
    is_up: bool = True
    is_default: bool = False


@dataclass(frozen=True)
class Snapshot:
    cpu_load_percent: float
    cpu_speed_ghz_avg: float
    mem_used_bytes: int
    mem_total_bytes: int
    network: tuple[NetworkInterfaceStats, ...] = ()
    gpu_controllers: tuple[GpuController, ...] = ()

    @property
    def mem_used_percent(self) -> float:
        if self.mem_total_bytes <= 0:
            return 0.0
        return self.mem_used_bytes / self.mem_total_bytes * 100.0
