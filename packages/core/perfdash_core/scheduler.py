"""Cancellable periodic task on the asyncio event loop."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from .logging_setup import get_logger


class PeriodicTask:
    """Runs ``callback`` every ``interval_s`` seconds, never two at once.

    A period that elapses while the previous callback is still running is
    skipped and counted in ``skipped``; it is not queued.
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[object]],
        interval_s: float,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self.callback = callback
        self.interval_s = interval_s
        self._sleep = sleep
        self._runner: asyncio.Task | None = None
        self._in_flight: asyncio.Task | None = None
        self._stopped = True
        self.fired = 0
        self.skipped = 0
        self._log = get_logger("scheduler")

    @property
    def running(self) -> bool:
        return not self._stopped

    def start(self) -> None:
        if not self._stopped:
            return
        self._stopped = False
        self._runner = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        self._stopped = True
        if self._runner is not None:
            self._runner.cancel()
            self._runner = None
        if self._in_flight is not None and not self._in_flight.done():
            self._in_flight.cancel()
        self._in_flight = None

    async def _run(self) -> None:
        while not self._stopped:
            await self._sleep(self.interval_s)
            if self._stopped:
                break
            if self._in_flight is not None and not self._in_flight.done():
                self.skipped += 1
                self._log.debug("period skipped, previous callback in flight", extra={"event": "tick_skipped"})
                continue
            self.fired += 1
            self._in_flight = asyncio.ensure_future(self.callback())
