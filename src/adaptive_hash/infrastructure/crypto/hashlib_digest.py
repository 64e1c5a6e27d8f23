"""Digest adapter backed by the interpreter's hashlib/OpenSSL algorithms."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable

from adaptive_hash.domain.errors import UnsupportedAlgorithmError

# SHAKE digests need an explicit output length and cannot form a fixed-size chain.
_VARIABLE_LENGTH_ALGORITHMS = frozenset({"shake_128", "shake_256", "shake128", "shake256"})


def _usable_digest_size(algorithm: str) -> int | None:
    try:
        return hashlib.new(algorithm).digest_size
    except ValueError:
        # Listed by OpenSSL but unusable, e.g. legacy provider not loaded.
        return None


class HashlibDigest:
    """Fixed-output digest functions available through ``hashlib.new``."""

    def __init__(self, algorithms: Iterable[str] | None = None) -> None:
        candidates = hashlib.algorithms_available if algorithms is None else algorithms
        sizes: dict[str, int] = {}
        for name in candidates:
            if name.lower() in _VARIABLE_LENGTH_ALGORITHMS:
                continue
            size = _usable_digest_size(name)
            if size:
                sizes[name] = size
        self._sizes = sizes
        self._algorithms = frozenset(sizes)

    def supported_algorithms(self) -> frozenset[str]:
        return self._algorithms

    def digest_size(self, algorithm: str) -> int:
        try:
            return self._sizes[algorithm]
        except KeyError:
            raise UnsupportedAlgorithmError(algorithm=algorithm) from None

    def digest(self, algorithm: str, data: bytes) -> bytes:
        return hashlib.new(algorithm, data).digest()
