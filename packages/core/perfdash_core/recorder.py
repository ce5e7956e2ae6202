"""Recording sessions and CSV export."""

from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable

from .errors import EmptyExportError, RecordingActiveError
from .logging_setup import get_logger


TIME_FORMAT = "%Y-%m-%d %H-%M-%S"
UNKNOWN_DEVICE = "UnknownDevice"
DEFAULT_MAX_RECORDS = 86400

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|]')


class RecorderState(str, Enum):
    IDLE = "Idle"
    RECORDING = "Recording"


@dataclass(frozen=True)
class Record:
    timestamp: datetime
    cpu_usage: float
    mem_usage: float
    network_rx_rate: float
    network_tx_rate: float
    gpu_usage_by_key: dict[str, float] = field(default_factory=dict)

    def columns(self) -> dict[str, object]:
        row: dict[str, object] = {
            "timestamp": self.timestamp,
            "cpuUsage": self.cpu_usage,
            "memUsage": self.mem_usage,
        }
        for key, usage in self.gpu_usage_by_key.items():
            row[f"gpu_{key}_usage"] = usage
        row["networkRxSpeed"] = self.network_rx_rate
        row["networkTxSpeed"] = self.network_tx_rate
        return row


def format_time(value: datetime) -> str:
    return value.strftime(TIME_FORMAT)


def format_network_speed(mb_per_s: float) -> str:
    if mb_per_s < 1:
        return f"{mb_per_s * 1024:.2f} KB/s"
    return f"{mb_per_s:.2f} MB/s"


def _format_cell(name: str, value: object) -> str:
    if value is None:
        return ""
    if name == "timestamp":
        return format_time(value)  # type: ignore[arg-type]
    if name in ("networkRxSpeed", "networkTxSpeed"):
        return format_network_speed(float(value))  # type: ignore[arg-type]
    if isinstance(value, (int, float)):
        return f"{value:.2f}"
    return str(value)


def render_csv(records: list[Record] | tuple[Record, ...]) -> str:
    """Header from the first record's columns; each row aligned to that header."""
    if not records:
        raise EmptyExportError("no records to export")

    header = list(records[0].columns())
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    for record in records:
        cols = record.columns()
        writer.writerow([_format_cell(name, cols.get(name)) for name in header])
    return buf.getvalue()


def safe_device_name(name: str | None) -> str:
    if not name or not name.strip():
        return UNKNOWN_DEVICE
    return _UNSAFE_FILENAME_RE.sub("_", name.strip())


class Recorder:
    """Idle/Recording state machine holding one record per sampled tick.

    ``stop`` while idle is a no-op. ``start`` while recording keeps the one
    session but clears it. ``export`` is a pure read of a stopped session.
    Reaching ``max_records`` stops the session.
    """

    def __init__(
        self,
        max_records: int = DEFAULT_MAX_RECORDS,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.max_records = max(1, int(max_records))
        self._now = now
        self._state = RecorderState.IDLE
        self._records: list[Record] = []
        self._started_at: datetime | None = None
        self._stopped_at: datetime | None = None
        self._log = get_logger("recorder")

    @property
    def state(self) -> RecorderState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is RecorderState.RECORDING

    @property
    def started_at(self) -> datetime | None:
        return self._started_at

    @property
    def stopped_at(self) -> datetime | None:
        return self._stopped_at

    @property
    def records(self) -> tuple[Record, ...]:
        return tuple(self._records)

    def start(self) -> bool:
        """Begin a session. Returns False when one is already running.

        A repeated start keeps the single running session but discards its
        records and restarts its clock.
        """
        restarted = self.is_recording
        self._records = []
        self._started_at = self._now()
        if restarted:
            self._log.info("start while recording, session records cleared", extra={"event": "invalid_transition"})
            return False
        self._stopped_at = None
        self._state = RecorderState.RECORDING
        self._log.info("recording started", extra={"event": "recording_started"})
        return True

    def stop(self) -> bool:
        if not self.is_recording:
            self._log.info("stop ignored, not recording", extra={"event": "invalid_transition"})
            return False
        self._state = RecorderState.IDLE
        self._stopped_at = self._now()
        self._log.info(
            f"recording stopped records={len(self._records)}",
            extra={"event": "recording_stopped"},
        )
        return True

    def append(self, record: Record) -> bool:
        if not self.is_recording:
            return False
        self._records.append(record)
        if len(self._records) >= self.max_records:
            self._log.warning(
                f"recording cap reached max_records={self.max_records}",
                extra={"event": "recording_cap_reached"},
            )
            self.stop()
        return True

    def export(self) -> str:
        if self.is_recording:
            raise RecordingActiveError("stop the recording before exporting")
        return render_csv(self._records)

    def suggested_filename(self, device_name: str | None = None, now: datetime | None = None) -> str:
        start = format_time(self._started_at) if self._started_at else ""
        end = format_time(now or self._now())
        return f"{start}-{end}-{safe_device_name(device_name)}-performance.csv"

    def export_to(self, directory: Path, device_name: str | None = None) -> Path:
        body = self.export()
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.suggested_filename(device_name)
        path.write_text(body, encoding="utf-8")
        self._log.info(f"recording exported path={path}", extra={"event": "recording_exported"})
        return path
