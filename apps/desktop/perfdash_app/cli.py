"""CLI entrypoints for the PerfDash live view, recording export, and raw snapshots."""

from __future__ import annotations

import argparse
import asyncio
import json
from dataclasses import asdict
from pathlib import Path

from perfdash_core import AppConfig, EmptyExportError, HistoryBuffer, Reading, Recorder, Sampler, load_config
from perfdash_core.logging_setup import configure_logging, get_logger
from perfdash_core.recorder import format_network_speed
from perfdash_telemetry import SyntheticGpuUsageSource, build_gpu_usage_source


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def build_sampler(cfg: AppConfig) -> Sampler:
    from perfdash_telemetry.provider import PsutilMetricsProvider

    try:
        gpu_usage = build_gpu_usage_source(cfg.gpu.usage_source, seed=cfg.gpu.seed)
    except Exception as exc:
        get_logger().warning(
            f"gpu usage source {cfg.gpu.usage_source} unavailable, using synthetic: {exc}",
            extra={"event": "gpu_source_fallback"},
        )
        gpu_usage = SyntheticGpuUsageSource(seed=cfg.gpu.seed)

    return Sampler(
        PsutilMetricsProvider(),
        gpu_usage=gpu_usage,
        history=HistoryBuffer(cfg.sampling.history_size),
        recorder=Recorder(max_records=cfg.recording.max_records),
        interval_ms=cfg.sampling.interval_ms,
    )


def format_reading(reading: Reading) -> str:
    parts = [
        reading.timestamp.strftime("%H:%M:%S"),
        f"CPU {reading.cpu_usage:05.1f}% {reading.cpu_speed_ghz:.2f}GHz",
        f"MEM {reading.mem_usage:05.1f}%",
    ]
    if reading.network_rx_rate is None or reading.network_tx_rate is None:
        parts.append("NET --")
    else:
        parts.append(
            f"NET Down {format_network_speed(reading.network_rx_rate)} Up {format_network_speed(reading.network_tx_rate)}"
        )
    for key, usage in reading.gpu_usage_by_key.items():
        parts.append(f"GPU[{key}] {usage:05.1f}%")
    return "  ".join(parts)


async def _run_for(sampler: Sampler, seconds: float | None) -> None:
    sampler.start()
    try:
        if seconds:
            await asyncio.sleep(seconds)
        else:
            await asyncio.Event().wait()
    finally:
        sampler.stop()


def cmd_run(args: argparse.Namespace) -> int:
    cfg = load_config()
    sampler = build_sampler(cfg)
    sampler.subscribe(lambda reading: print(format_reading(reading), flush=True))
    try:
        asyncio.run(_run_for(sampler, args.seconds))
    except KeyboardInterrupt:
        pass
    return 0


def cmd_record(args: argparse.Namespace) -> int:
    cfg = load_config()
    sampler = build_sampler(cfg)
    recorder = sampler.recorder

    recorder.start()
    try:
        asyncio.run(_run_for(sampler, args.seconds))
    except KeyboardInterrupt:
        pass
    finally:
        recorder.stop()

    out_dir = args.out_dir or cfg.recording.export_dir
    directory = Path(out_dir).expanduser().resolve() if out_dir else Path.cwd()
    try:
        path = recorder.export_to(directory, sampler.device_name)
    except EmptyExportError as exc:
        _print_json({"success": False, "error": str(exc), "records": 0})
        return 2

    _print_json({"success": True, "path": str(path), "records": len(recorder.records)})
    return 0


async def _snapshot(sampler: Sampler) -> dict:
    static = await sampler.provider.get_cpu_static_info()
    snap = await sampler.fetch()
    return {"cpu": asdict(static), "device_name": static.device_name, "snapshot": asdict(snap)}


def cmd_snapshot(_args: argparse.Namespace) -> int:
    sampler = build_sampler(load_config())
    _print_json(asyncio.run(_snapshot(sampler)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="perfdash", description="PerfDash host performance monitor")
    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser("run", help="Live console dashboard")
    run_cmd.add_argument("--seconds", type=float, default=None, help="Stop after this many seconds")
    run_cmd.set_defaults(func=cmd_run)

    rec_cmd = sub.add_parser("record", help="Record a session and export it as CSV")
    rec_cmd.add_argument("--seconds", type=float, default=60.0)
    rec_cmd.add_argument("--out-dir", default=None, help="Directory for the exported CSV")
    rec_cmd.set_defaults(func=cmd_record)

    snap_cmd = sub.add_parser("snapshot", help="Print one raw metrics snapshot")
    snap_cmd.set_defaults(func=cmd_snapshot)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    cfg = load_config()
    configure_logging(keep_files=cfg.diagnostics.keep_log_files, console=False)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
