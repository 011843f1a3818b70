"""
Clock abstraction.

Rate gates schedule on the monotonic clock, signed requests are stamped with
wall-clock milliseconds. Both go through a Clock so tests can substitute a
virtual one.
"""

import asyncio
import time


class Clock:
    """Real time source backed by the time module and asyncio.sleep"""

    def monotonic(self) -> float:
        """Seconds from an arbitrary origin, never going backwards"""
        return time.monotonic()

    def time_ms(self) -> int:
        """Wall-clock epoch milliseconds"""
        return int(time.time() * 1000)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
