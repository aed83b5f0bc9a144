"""
Rate Limiter

Fixed-window throttle for calls to quota-limited upstream APIs. At most
`limit` calls are let through per `interval` seconds; the call that exceeds
the limit blocks until the window ends and then opens a new window as its
first call.
"""

import threading
import time
from typing import Callable, Optional

from stock_backend.utils.logger import create_logger

logger = create_logger(__name__)


class RateLimiter:
    """Fixed-window call limiter."""

    def __init__(
        self,
        limit: int,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        stop_event: Optional[threading.Event] = None,
    ):
        """
        Initialize rate limiter.

        Args:
            limit: Maximum calls per window
            interval: Window length in seconds
            clock: Monotonic time source (seconds)
            stop_event: When set, a pending wait returns immediately
        """
        self.limit = limit
        self.interval = interval
        self.clock = clock
        self.stop_event = stop_event or threading.Event()
        self.count = 0
        self.last_reset = clock()
        self._lock = threading.Lock()

    def wait_if_needed(self) -> float:
        """
        Count one call and block if the window's limit is exceeded.

        Returns:
            float: Seconds spent waiting (0.0 when not throttled)
        """
        with self._lock:
            now = self.clock()

            # Window elapsed: start a new one
            if now - self.last_reset >= self.interval:
                self.count = 0
                self.last_reset = now

            self.count += 1
            if self.count <= self.limit:
                return 0.0

            sleep = self.interval - (now - self.last_reset)
            if sleep > 0:
                logger.info(f"Rate limit of {self.limit} calls reached, sleeping for {sleep:.1f}s")
                self._sleep(sleep)

            self.count = 1
            self.last_reset = self.clock()
            return max(sleep, 0.0)

    def _sleep(self, seconds: float):
        # Event.wait returns early once stop_event is set (shutdown)
        if self.stop_event.wait(seconds):
            logger.info("Rate limiter wait interrupted by stop event")
