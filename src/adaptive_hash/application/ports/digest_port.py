"""Port for fixed-output digest functions selected by name."""

from __future__ import annotations

from typing import Protocol


class DigestPort(Protocol):
    """Digest function provider contract."""

    def supported_algorithms(self) -> frozenset[str]:
        """Return every algorithm name accepted by ``digest``."""

    def digest_size(self, algorithm: str) -> int:
        """Return the output length in bytes for one supported algorithm."""

    def digest(self, algorithm: str, data: bytes) -> bytes:
        """Return the digest of ``data`` using the named algorithm."""
