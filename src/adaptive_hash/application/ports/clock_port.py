"""Port for monotonic wall-clock sampling."""

from __future__ import annotations

from typing import Protocol


class ClockPort(Protocol):
    """Monotonic clock contract."""

    def now(self) -> float:
        """Return monotonic time in seconds."""
