"""
Request pacing for the Discogs API, which allows 60 authenticated requests per minute.
"""

import asyncio
import logging
import time

log = logging.getLogger(__name__)


class RequestPacer:
    """
    Enforces a fixed minimum interval between the starts of consecutive calls.

    The first call goes through immediately; every later call waits until
    `min_interval` seconds have passed since the previous one started.
    """

    def __init__(self, min_interval: float = 1.0):
        self.min_interval = min_interval
        self._last_call_time: float | None = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Waits until the next call is allowed to start."""
        async with self._lock:
            loop = asyncio.get_running_loop()
            if self._last_call_time is not None:
                wait = self.min_interval - (loop.time() - self._last_call_time)
                if wait > 0:
                    await asyncio.sleep(wait)
            self._last_call_time = loop.time()


class AdaptiveRateLimiter:
    """
    Dynamically adjusts call rate based on API feedback (429 errors).
    """

    def __init__(
        self, initial_calls_per_second: float = 1.0, max_calls_per_second: float = 1.0
    ):
        """
        Initializes the rate limiter.

        Args:
            initial_calls_per_second: The starting rate of calls per second.
            max_calls_per_second: The maximum rate to recover to.
        """
        self._rate = initial_calls_per_second
        self._max_rate = max_calls_per_second
        self._min_interval = 1.0 / self._rate
        self._last_call_time = 0.0
        self._last_429_time = 0.0
        self._lock = asyncio.Lock()

    @property
    def rate(self) -> float:
        return self._rate

    async def on_429(self) -> None:
        """
        Called when a 429 error is received. Halves the current request rate.
        """
        async with self._lock:
            # Discogs counts a moving 60s window, so go well below one call/sec
            self._rate = max(0.1, self._rate * 0.5)
            self._min_interval = 1.0 / self._rate
            self._last_429_time = time.monotonic()
            log.warning(
                f"[yellow]Rate limit hit. New rate: {self._rate:.2f} calls/s[/yellow]"
            )

    async def acquire(self) -> None:
        """
        Waits if necessary to respect the current rate limit before allowing a call to proceed.
        """
        async with self._lock:
            # Gradually recover the rate if no 429 errors have occurred recently
            if time.monotonic() - self._last_429_time > 120:
                self._rate = min(self._max_rate, self._rate * 1.05)
                self._min_interval = 1.0 / self._rate

            loop = asyncio.get_running_loop()
            time_since_last = loop.time() - self._last_call_time

            if time_since_last < self._min_interval:
                await asyncio.sleep(self._min_interval - time_since_last)

            self._last_call_time = loop.time()
