"""Fixed-interval gate used to pace requests to a rate-limited provider."""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class IntervalGate:
    """Lets callers through no more often than once per ``interval`` seconds.

    The clock and sleep function are injectable so the pacing policy can be
    tested without real delays.
    """

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last_pass: Optional[float] = None
        self._lock = asyncio.Lock()

    async def wait(self) -> float:
        """Block until the next pass is allowed.

        Returns:
            float: Seconds spent waiting.
        """
        async with self._lock:
            waited = 0.0
            if self._last_pass is not None:
                remaining = self.interval - (self._clock() - self._last_pass)
                if remaining > 0:
                    logger.debug(f"Pacing gate sleeping {remaining:.3f}s")
                    await self._sleep(remaining)
                    waited = remaining
            self._last_pass = self._clock()
            return waited

    def reset(self) -> None:
        self._last_pass = None
