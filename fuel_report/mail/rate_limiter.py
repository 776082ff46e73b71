"""
Process-wide outbound send rate limiter.
"""

from __future__ import annotations

import threading
import time


class RateLimiter:
    """
    Enforces a minimum interval between sends across all threads.
    """

    def __init__(self, *, rate_limit_per_second: float) -> None:
        self._min_interval = 1.0 / max(0.1, rate_limit_per_second)
        self._last_send = 0.0
        self._lock = threading.Lock()

    @property
    def min_interval_seconds(self) -> float:
        return self._min_interval

    def wait(self) -> None:
        """
        Sleep as needed so sends respect the configured rate.
        """

        with self._lock:
            elapsed = time.monotonic() - self._last_send
            wait_seconds = self._min_interval - elapsed
            if wait_seconds > 0:
                time.sleep(wait_seconds)
            self._last_send = time.monotonic()
