"""
Clocks used for every timed wait in the motion layer.

All suspension goes through clock.sleep_ms(), so swapping AsyncioClock for
VirtualClock makes a whole pattern run instantly and deterministically.
"""

import asyncio
import time


class AsyncioClock:
    """Wall-clock waits on the running event loop."""

    def now_ms(self):
        return time.monotonic() * 1000.0

    async def sleep_ms(self, ms):
        await asyncio.sleep(max(0, ms) / 1000.0)


class VirtualClock:
    """
    Simulated time for tests and dry runs.

    sleep_ms() advances the virtual time by `ms` and yields to the event
    loop once, so other tasks (trigger reactions) still get scheduled.
    """

    def __init__(self, start_ms=0.0):
        self._now_ms = float(start_ms)
        self.sleeps = []

    def now_ms(self):
        return self._now_ms

    async def sleep_ms(self, ms):
        ms = max(0, ms)
        self.sleeps.append(ms)
        self._now_ms += ms
        await asyncio.sleep(0)
