"""Fixed-cadence sampling loop feeding history windows and the recorder."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable

from perfdash_telemetry.gpu_usage import GpuUsageSource, SyntheticGpuUsageSource
from perfdash_telemetry.models import CpuStaticInfo, Snapshot
from perfdash_telemetry.provider import MetricsProvider

from .errors import FetchFailure
from .gpu_keys import gpu_series_key, resolve_gpu_key
from .history import HistoryBuffer
from .logging_setup import get_logger
from .rates import bytes_to_mb, compute_rates
from .recorder import Record, Recorder
from .scheduler import PeriodicTask


DEFAULT_INTERVAL_MS = 1000

CPU_KEY = "cpu"
MEM_KEY = "mem"
NET_RX_KEY = "net.rx"
NET_TX_KEY = "net.tx"


def network_counters(snapshot: Snapshot) -> dict[str, float]:
    """Cumulative byte counters keyed by series name.

    Totals cover every reported interface; per-interface keys only cover
    interfaces that are up.
    """
    counters: dict[str, float] = {
        NET_RX_KEY: float(sum(n.rx_bytes for n in snapshot.network)),
        NET_TX_KEY: float(sum(n.tx_bytes for n in snapshot.network)),
    }
    for nic in snapshot.network:
        if not nic.is_up:
            continue
        counters[f"{NET_RX_KEY}.{nic.interface_name}"] = float(nic.rx_bytes)
        counters[f"{NET_TX_KEY}.{nic.interface_name}"] = float(nic.tx_bytes)
    return counters


@dataclass
class SamplerState:
    previous_counters: dict[str, float] | None = None
    previous_timestamp: float | None = None
    last_rx_rate: float = 0.0
    last_tx_rate: float = 0.0


@dataclass(frozen=True)
class Reading:
    timestamp: datetime
    cpu_usage: float
    cpu_speed_ghz: float
    mem_usage: float
    network_rx_rate: float | None
    network_tx_rate: float | None
    rates: dict[str, float] = field(default_factory=dict)
    gpu_usage_by_key: dict[str, float] = field(default_factory=dict)


class Sampler:
    """Polls a ``MetricsProvider`` once per tick and applies the result atomically.

    A tick either applies all of its values (history windows, latest reading,
    one recorder row) or none of them. Fetch failures are logged and the tick
    is dropped; nothing is raised to the caller.
    """

    def __init__(
        self,
        provider: MetricsProvider,
        gpu_usage: GpuUsageSource | None = None,
        history: HistoryBuffer | None = None,
        recorder: Recorder | None = None,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.gpu_usage = gpu_usage or SyntheticGpuUsageSource()
        self.history = history if history is not None else HistoryBuffer()
        self.recorder = recorder if recorder is not None else Recorder()
        self.interval_ms = interval_ms
        self._clock = clock
        self._now = now
        self._sleep = sleep

        self._state = SamplerState()
        self._cpu_info: CpuStaticInfo | None = None
        self._cpu_info_warned = False
        self._latest: Reading | None = None
        self._subscribers: list[Callable[[Reading], None]] = []
        self._in_flight = False
        self._generation = 0
        self._task: PeriodicTask | None = None
        self._log = get_logger("sampler")

    @property
    def state(self) -> SamplerState:
        return self._state

    @property
    def latest(self) -> Reading | None:
        return self._latest

    @property
    def cpu_info(self) -> CpuStaticInfo | None:
        return self._cpu_info

    @property
    def device_name(self) -> str | None:
        return self._cpu_info.device_name if self._cpu_info else None

    @property
    def running(self) -> bool:
        return self._task is not None and self._task.running

    def subscribe(self, callback: Callable[[Reading], None]) -> None:
        self._subscribers.append(callback)

    def start(self, interval_ms: int | None = None) -> None:
        if self.running:
            return
        if interval_ms is not None:
            self.interval_ms = interval_ms
        self._task = PeriodicTask(self.tick, self.interval_ms / 1000.0, sleep=self._sleep)
        self._task.start()
        self._log.info(f"sampler started interval_ms={self.interval_ms}", extra={"event": "sampler_started"})

    def stop(self) -> None:
        self._generation += 1
        if self._task is not None:
            self._task.stop()
            self._task = None
            self._log.info("sampler stopped", extra={"event": "sampler_stopped"})

    async def fetch(self) -> Snapshot:
        """Fetch every dynamic fragment concurrently; raise ``FetchFailure`` if any fails."""
        p = self.provider
        try:
            mem, network, load, speed, graphics = await asyncio.gather(
                p.get_mem_info(),
                p.get_network_info(),
                p.get_cpu_current_load(),
                p.get_cpu_speed(),
                p.get_graphics_info(),
            )
        except Exception as exc:
            raise FetchFailure(f"{type(exc).__name__}: {exc}") from exc

        return Snapshot(
            cpu_load_percent=float(load.current_load_percent),
            cpu_speed_ghz_avg=float(speed.avg_ghz),
            mem_used_bytes=int(mem.used_bytes),
            mem_total_bytes=int(mem.total_bytes),
            network=tuple(network),
            gpu_controllers=tuple(graphics.controllers),
        )

    async def tick(self) -> Reading | None:
        if self._in_flight:
            self._log.debug("tick skipped, previous tick in flight", extra={"event": "tick_skipped"})
            return None

        self._in_flight = True
        generation = self._generation
        try:
            await self._ensure_cpu_info()
            try:
                snapshot = await self.fetch()
            except FetchFailure as exc:
                self._log.warning(f"tick discarded: {exc}", extra={"event": "tick_discarded"})
                return None

            if generation != self._generation:
                self._log.debug("tick dropped after stop", extra={"event": "tick_dropped"})
                return None
            return self._apply(snapshot, self._clock(), self._now())
        finally:
            self._in_flight = False

    async def _ensure_cpu_info(self) -> None:
        if self._cpu_info is not None:
            return
        try:
            self._cpu_info = await self.provider.get_cpu_static_info()
        except Exception as exc:
            if not self._cpu_info_warned:
                self._cpu_info_warned = True
                self._log.warning(f"cpu static info unavailable: {exc}", extra={"event": "cpu_info_unavailable"})

    def _apply(self, snapshot: Snapshot, ts: float, wall: datetime) -> Reading | None:
        state = self._state
        counters = network_counters(snapshot)

        rates: dict[str, float] = {}
        if state.previous_counters is not None and state.previous_timestamp is not None:
            elapsed = ts - state.previous_timestamp
            if elapsed <= 0:
                self._log.warning(f"non-positive elapsed {elapsed:.6f}s, rates skipped", extra={"event": "degenerate_elapsed"})
            else:
                raw = compute_rates(state.previous_counters, counters, elapsed)
                rates = {key: bytes_to_mb(value) for key, value in raw.items()}

        try:
            gpu_usages: dict[str, float] = {}
            for idx, controller in enumerate(snapshot.gpu_controllers):
                gpu_usages[resolve_gpu_key(controller, idx)] = float(self.gpu_usage.usage(controller, idx))
        except Exception as exc:
            self._log.warning(f"tick discarded: gpu usage failed: {exc}", extra={"event": "tick_discarded"})
            return None

        cpu = snapshot.cpu_load_percent
        mem = snapshot.mem_used_percent

        self.history.push(CPU_KEY, cpu)
        self.history.push(MEM_KEY, mem)
        for key, value in rates.items():
            self.history.push(key, value)
        for key, usage in gpu_usages.items():
            self.history.push(gpu_series_key(key), usage)

        state.previous_counters = counters
        state.previous_timestamp = ts
        state.last_rx_rate = rates.get(NET_RX_KEY, state.last_rx_rate)
        state.last_tx_rate = rates.get(NET_TX_KEY, state.last_tx_rate)

        reading = Reading(
            timestamp=wall,
            cpu_usage=cpu,
            cpu_speed_ghz=snapshot.cpu_speed_ghz_avg,
            mem_usage=mem,
            network_rx_rate=rates.get(NET_RX_KEY),
            network_tx_rate=rates.get(NET_TX_KEY),
            rates=rates,
            gpu_usage_by_key=gpu_usages,
        )
        self._latest = reading

        if self.recorder.is_recording:
            self.recorder.append(
                Record(
                    timestamp=wall,
                    cpu_usage=cpu,
                    mem_usage=mem,
                    network_rx_rate=state.last_rx_rate,
                    network_tx_rate=state.last_tx_rate,
                    gpu_usage_by_key=dict(gpu_usages),
                )
            )

        for callback in list(self._subscribers):
            try:
                callback(reading)
            except Exception:
                self._log.exception("subscriber failed", extra={"event": "subscriber_failed"})
        return reading
