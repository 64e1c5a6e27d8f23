"""Port for uniformly random byte generation used for salts."""

from __future__ import annotations

from typing import Protocol


class RandomBytesPort(Protocol):
    """Random byte source contract."""

    def random_bytes(self, count: int) -> bytes:
        """Return ``count`` uniformly random bytes."""
