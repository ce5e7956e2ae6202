"""Per-platform data paths and JSON-line logging for every PerfDash component.

Components never configure handlers themselves. They ask for
``get_logger("<component>")`` and pass ``extra={"event": ...}``; only the
entry point calls ``configure_logging``.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


ROOT_LOGGER = "perfdash"
LOG_FILENAME = "perfdash.log"
CONSOLE_FORMAT = "%(levelname)s %(name)s %(message)s"


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        return Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming")) / "PerfDash"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "PerfDash"
    return Path.home() / ".config" / "perfdash"


def log_dir(root: Path | None = None) -> Path:
    path = (root or config_root()) / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def component_of(logger_name: str) -> str | None:
    """``perfdash.sampler`` -> ``sampler``; the root logger has no component."""
    prefix = ROOT_LOGGER + "."
    if logger_name.startswith(prefix):
        return logger_name[len(prefix):]
    return None


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with the component and event split out."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        component = component_of(record.name)
        if component:
            payload["component"] = component
        event = getattr(record, "event", None)
        if event:
            payload["event"] = event
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def configure_logging(
    keep_files: int = 7,
    console: bool = True,
    level: int = logging.INFO,
    root: Path | None = None,
) -> logging.Logger:
    """Attach the rotating JSON file handler (and optionally a console one).

    Calling it again once handlers exist returns the logger untouched.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    if logger.handlers:
        return logger

    logger.setLevel(level)
    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(log_dir(root) / LOG_FILENAME),
        when="midnight",
        backupCount=max(2, keep_files),
        encoding="utf-8",
    )
    file_handler.setFormatter(JsonFormatter())
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    logger.info(f"logging configured level={logging.getLevelName(level)}", extra={"event": "logging_configured"})
    return logger


def get_logger(component: str | None = None) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{component}" if component else ROOT_LOGGER)
