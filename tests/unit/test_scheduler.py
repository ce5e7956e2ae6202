import asyncio
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from perfdash_core.scheduler import PeriodicTask


async def _no_wait(_seconds):
    await asyncio.sleep(0)


class PeriodicTaskTests(unittest.IsolatedAsyncioTestCase):
    async def test_slow_callback_skips_periods_instead_of_queueing(self):
        gate = asyncio.Event()
        calls = []

        async def slow():
            calls.append(1)
            await gate.wait()

        task = PeriodicTask(slow, 1.0, sleep=_no_wait)
        task.start()
        for _ in range(10):
            await asyncio.sleep(0)

        self.assertEqual(len(calls), 1)
        self.assertGreater(task.skipped, 0)

        gate.set()
        for _ in range(10):
            await asyncio.sleep(0)
        self.assertGreater(len(calls), 1)
        task.stop()

    async def test_stop_prevents_further_callbacks(self):
        calls = []

        async def fast():
            calls.append(1)

        task = PeriodicTask(fast, 1.0, sleep=_no_wait)
        task.start()
        for _ in range(10):
            await asyncio.sleep(0)
        task.stop()
        self.assertFalse(task.running)
        seen = len(calls)
        self.assertGreater(seen, 0)

        for _ in range(10):
            await asyncio.sleep(0)
        self.assertEqual(len(calls), seen)

    async def test_stop_cancels_in_flight_callback(self):
        finished = []

        async def slow():
            await asyncio.Event().wait()
            finished.append(1)

        task = PeriodicTask(slow, 1.0, sleep=_no_wait)
        task.start()
        for _ in range(5):
            await asyncio.sleep(0)
        in_flight = task._in_flight
        task.stop()
        await asyncio.sleep(0)
        self.assertTrue(in_flight.cancelled())
        self.assertEqual(finished, [])

    async def test_start_is_idempotent(self):
        async def noop():
            return None

        task = PeriodicTask(noop, 1.0, sleep=_no_wait)
        task.start()
        runner = task._runner
        task.start()
        self.assertIs(task._runner, runner)
        task.stop()


if __name__ == "__main__":
    unittest.main()
