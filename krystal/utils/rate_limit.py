from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Callable, Deque


class RateLimiter:
    """Sliding-window request counter.

    Advisory only: nothing calls it automatically. Check ``can_request`` before
    a call and ``record_request`` right after issuing it, or use ``wait``.
    """

    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: Deque[float] = deque()

    def can_request(self) -> bool:
        self._cleanup()
        return len(self._requests) < self.max_requests

    def record_request(self) -> None:
        self._cleanup()
        self._requests.append(self._clock())

    def time_until_next_request(self) -> float:
        self._cleanup()
        if len(self._requests) < self.max_requests or not self._requests:
            return 0.0
        elapsed = self._clock() - self._requests[0]
        return max(0.0, self.window_seconds - elapsed)

    async def wait(self) -> None:
        """Sleep until a slot is free, then claim it."""
        while not self.can_request():
            await asyncio.sleep(self.time_until_next_request())
        self.record_request()

    def _cleanup(self) -> None:
        cutoff = self._clock() - self.window_seconds
        while self._requests and self._requests[0] < cutoff:
            self._requests.popleft()
