"""Exceptions raised by the metrics core."""

from __future__ import annotations


class PerfDashError(Exception):
    pass


class FetchFailure(PerfDashError):
    """One or more provider calls failed during a tick."""


class EmptyExportError(PerfDashError):
    """Export requested for a session without records."""


class RecordingActiveError(PerfDashError):
    """Export requested while a session is still recording."""
