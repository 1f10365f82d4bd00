"""
Rate limit service module.

Fixed-window request quotas per client address. Counters reset at the end
of each window rather than tracking a rolling log, so a burst straddling a
window boundary can reach up to twice the nominal quota.
"""

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict


@dataclass
class RateWindow:
    """Request counter for one client within the current window."""
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one admission check."""
    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    now: float

    @property
    def reset_after(self) -> int:
        """Whole seconds until the window resets (at least 1 while open)."""
        return max(1, math.ceil(self.reset_at - self.now))

    def headers(self) -> Dict[str, str]:
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_after),
        }


class FixedWindowRateLimiter:
    """
    Admit at most max_requests per client key within each window.

    Example:
        >>> limiter = FixedWindowRateLimiter(max_requests=2, window_seconds=60)
        >>> [limiter.admit("1.2.3.4").allowed for _ in range(3)]
        [True, True, False]
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 900,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._timer = timer
        self._windows: Dict[str, RateWindow] = {}
        self._lock = threading.Lock()
        self._next_sweep = timer() + window_seconds

    def admit(self, client_key: str) -> RateLimitDecision:
        with self._lock:
            now = self._timer()
            if now >= self._next_sweep:
                self._sweep(now)

            window = self._windows.get(client_key)
            if window is None or now >= window.reset_at:
                window = RateWindow(count=0, reset_at=now + self.window_seconds)
                self._windows[client_key] = window

            if window.count >= self.max_requests:
                return RateLimitDecision(
                    allowed=False,
                    limit=self.max_requests,
                    remaining=0,
                    reset_at=window.reset_at,
                    now=now,
                )

            window.count += 1
            return RateLimitDecision(
                allowed=True,
                limit=self.max_requests,
                remaining=self.max_requests - window.count,
                reset_at=window.reset_at,
                now=now,
            )

    def reset(self, client_key: str = None) -> None:
        """Forget one client's window, or every window when no key is given."""
        with self._lock:
            if client_key is None:
                self._windows.clear()
            else:
                self._windows.pop(client_key, None)

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._windows)

    def _sweep(self, now: float) -> None:
        # Caller holds the lock
        expired = [key for key, window in self._windows.items() if now >= window.reset_at]
        for key in expired:
            del self._windows[key]
        self._next_sweep = now + self.window_seconds
