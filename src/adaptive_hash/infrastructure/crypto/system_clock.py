"""Monotonic clock adapter."""

from __future__ import annotations

import time


class PerfCounterClock:
    """Clock reading ``time.perf_counter`` for high-resolution round timing."""

    def now(self) -> float:
        return time.perf_counter()
