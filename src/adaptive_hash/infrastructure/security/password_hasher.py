"""Adaptive password hasher adapter and default hasher wiring."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial

from adaptive_hash.application.ports.digest_port import DigestPort
from adaptive_hash.application.ports.password_hasher_port import PasswordHasherPort
from adaptive_hash.application.services.adaptive_hasher import AdaptiveHasher
from adaptive_hash.config.settings import Settings
from adaptive_hash.domain.errors import DeserializationError, UnsupportedAlgorithmError
from adaptive_hash.domain.hash_state import (
    DEFAULT_ALGORITHM,
    DEFAULT_MIN_ITERATIONS_LOG2,
    DEFAULT_MIN_TIME,
    CalibrationTargets,
)
from adaptive_hash.infrastructure.crypto.hashlib_digest import HashlibDigest
from adaptive_hash.infrastructure.crypto.system_clock import PerfCounterClock
from adaptive_hash.infrastructure.crypto.system_random import SecretsRandomBytes

logger = logging.getLogger(__name__)

HasherFactory = Callable[[], AdaptiveHasher]


def create_adaptive_hasher(
    *,
    digest: DigestPort | None = None,
    short_circuit_known_plaintext: bool = True,
) -> AdaptiveHasher:
    """Build a hasher wired to hashlib, perf_counter and the OS random source.

    Pass ``digest`` to reuse an adapter; building a ``HashlibDigest`` instantiates
    every algorithm OpenSSL lists.
    """

    return AdaptiveHasher(
        digest=digest if digest is not None else HashlibDigest(),
        clock=PerfCounterClock(),
        random_source=SecretsRandomBytes(),
        short_circuit_known_plaintext=short_circuit_known_plaintext,
    )


@dataclass(frozen=True)
class PasswordCheck:
    """Verification result carrying the hash to store afterwards."""

    matched: bool
    password_hash: str
    rehashed: bool = False


class AdaptivePasswordHasher(PasswordHasherPort):
    """Password hashing adapter using self-calibrating digest chains."""

    def __init__(
        self,
        *,
        algorithm: str = DEFAULT_ALGORITHM,
        min_time: float = DEFAULT_MIN_TIME,
        min_iterations_log2: int = DEFAULT_MIN_ITERATIONS_LOG2,
        hasher_factory: HasherFactory | None = None,
    ) -> None:
        self._algorithm = algorithm
        self._targets = CalibrationTargets(
            min_time=min_time,
            min_iterations_log2=min_iterations_log2,
        )
        if hasher_factory is None:
            hasher_factory = partial(create_adaptive_hasher, digest=HashlibDigest())
        self._hasher_factory = hasher_factory

    @classmethod
    def from_settings(cls, settings: Settings) -> AdaptivePasswordHasher:
        return cls(
            algorithm=settings.algorithm,
            min_time=settings.min_time,
            min_iterations_log2=settings.min_iterations_log2,
            hasher_factory=partial(
                create_adaptive_hasher,
                digest=HashlibDigest(),
                short_circuit_known_plaintext=settings.short_circuit_known_plaintext,
            ),
        )

    def hash_password(self, password: str) -> str:
        hasher = self._hasher_factory()
        return hasher.create_from_plaintext(
            password.encode("utf-8"),
            algorithm=self._algorithm,
            min_time=self._targets.min_time,
            min_iterations_log2=self._targets.min_iterations_log2,
        )

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        hasher = self._load(password_hash)
        if hasher is None:
            return False
        return hasher.does_match_plaintext(password.encode("utf-8"))

    def needs_rehash(self, password_hash: str) -> bool:
        hasher = self._load(password_hash)
        if hasher is None or hasher.state is None:
            return True
        state = hasher.state
        return state.algorithm != self._algorithm or state.needs_hashing(self._targets)

    def verify_and_update(self, *, password: str, password_hash: str) -> PasswordCheck:
        """Verify ``password`` and bring a matching hash up to the current policy."""

        hasher = self._load(password_hash)
        if hasher is None or not hasher.does_match_plaintext(password.encode("utf-8")):
            return PasswordCheck(matched=False, password_hash=password_hash)

        previous_algorithm = hasher.state.algorithm if hasher.state is not None else None
        hashed_further = hasher.continue_hashing(
            algorithm=self._algorithm,
            min_time=self._targets.min_time,
            min_iterations_log2=self._targets.min_iterations_log2,
        )
        # An algorithm switch changes the record even when no rounds run.
        switched = hasher.state is not None and hasher.state.algorithm != previous_algorithm
        if not (hashed_further or switched):
            return PasswordCheck(matched=True, password_hash=password_hash)
        return PasswordCheck(matched=True, password_hash=hasher.serialize(), rehashed=True)

    def _load(self, password_hash: str) -> AdaptiveHasher | None:
        hasher = self._hasher_factory()
        try:
            hasher.deserialize(password_hash)
        except (DeserializationError, UnsupportedAlgorithmError) as exc:
            logger.warning("stored_hash_unreadable error=%s", exc)
            return None
        return hasher
