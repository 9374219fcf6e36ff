"""
Client-side rate budgets.

Each ApiClient owns one SlidingWindowLimiter; nothing is shared between
clients, so exhausting one traffic class never throttles another.
"""

import asyncio
import time
from collections import deque
from typing import Callable, Deque, Optional, Tuple

from .errors import RateLimitError
from .types import RateBudget


class SlidingWindowLimiter:
    """At most ``budget.max_requests`` acquisitions in any rolling ``budget.window_ms``."""

    def __init__(self, budget: RateBudget, clock: Callable[[], float] = time.monotonic) -> None:
        self._budget = budget
        self._clock = clock
        self._timestamps: Deque[float] = deque()

    @property
    def budget(self) -> RateBudget:
        return self._budget

    def _prune(self, now: float) -> None:
        cutoff = now - self._budget.window_seconds
        while self._timestamps and self._timestamps[0] <= cutoff:
            self._timestamps.popleft()

    def remaining(self, now: Optional[float] = None) -> int:
        """Requests still allowed in the current window."""
        now = self._clock() if now is None else now
        self._prune(now)
        return max(self._budget.max_requests - len(self._timestamps), 0)

    def try_acquire(self, now: Optional[float] = None) -> Tuple[bool, Optional[float]]:
        """
        Record a request if the budget allows it.

        Returns (allowed, retry_after_seconds); retry_after is the time until
        the oldest request in the window expires.
        """
        now = self._clock() if now is None else now
        self._prune(now)
        if len(self._timestamps) >= self._budget.max_requests:
            oldest = self._timestamps[0]
            return False, max(self._budget.window_seconds - (now - oldest), 0.0)
        self._timestamps.append(now)
        return True, None

    async def acquire(self, wait: bool = False) -> None:
        """Consume one slot, sleeping for it when ``wait`` is set; else raise RateLimitError."""
        while True:
            allowed, retry_after = self.try_acquire()
            if allowed:
                return
            if not wait:
                raise RateLimitError(
                    "Rate limit exceeded - too many requests",
                    retry_after=retry_after,
                    client_side=True,
                )
            await asyncio.sleep(retry_after or 0)
