"""Self-calibrating hasher service driving digest-chain state transitions."""

from __future__ import annotations

import logging
from functools import partial

from pydantic import ValidationError

from adaptive_hash.application.dto.hash_record_models import HashRecord, encode_binary
from adaptive_hash.application.ports.clock_port import ClockPort
from adaptive_hash.application.ports.digest_port import DigestPort
from adaptive_hash.application.ports.random_bytes_port import RandomBytesPort
from adaptive_hash.domain.calibration import (
    DigestFn,
    is_known_plaintext,
    iter_calibration_rounds,
    start_chain,
    verify_candidate,
)
from adaptive_hash.domain.errors import (
    DeserializationError,
    EmptyHashError,
    NoExistingHashError,
    PlaintextRequiredForRehashError,
    UnsupportedAlgorithmError,
)
from adaptive_hash.domain.hash_state import (
    DEFAULT_ALGORITHM,
    DEFAULT_MIN_ITERATIONS_LOG2,
    DEFAULT_MIN_TIME,
    CalibrationTargets,
    HashState,
)

logger = logging.getLogger(__name__)


class AdaptiveHasher:
    """Own one hash state and calibrate it against time and iteration floors.

    Instances are not thread-safe; callers sharing one must serialize access.
    The current state is replaced once per completed doubling round, so an
    interrupted calibration leaves a consistent state that can be resumed with
    ``continue_hashing``.
    """

    def __init__(
        self,
        *,
        digest: DigestPort,
        clock: ClockPort,
        random_source: RandomBytesPort,
        short_circuit_known_plaintext: bool = True,
    ) -> None:
        self._digest = digest
        self._clock = clock
        self._random_source = random_source
        self._short_circuit_known_plaintext = short_circuit_known_plaintext
        self._state: HashState | None = None
        self._targets = CalibrationTargets()

    @property
    def state(self) -> HashState | None:
        return self._state

    @property
    def targets(self) -> CalibrationTargets:
        return self._targets

    def supported_algorithms(self) -> frozenset[str]:
        return self._digest.supported_algorithms()

    def create_from_plaintext(
        self,
        plaintext: bytes,
        *,
        algorithm: str = DEFAULT_ALGORITHM,
        min_time: float = DEFAULT_MIN_TIME,
        min_iterations_log2: int = DEFAULT_MIN_ITERATIONS_LOG2,
    ) -> str:
        """Hash ``plaintext`` from scratch until calibrated and return the record."""

        self._require_supported(algorithm)
        targets = CalibrationTargets(min_time=min_time, min_iterations_log2=min_iterations_log2)

        self._state = self._start_chain(algorithm=algorithm, plaintext=bytes(plaintext))
        self._targets = targets
        self._calibrate()
        return self.serialize()

    def continue_hashing(
        self,
        *,
        algorithm: str | None = None,
        min_time: float | None = None,
        min_iterations_log2: int | None = None,
    ) -> bool:
        """Hash until current targets are met; return whether any work was needed.

        Switching ``algorithm`` restarts the chain from the known plaintext.
        """

        state = self._state
        if state is None or not state.has_digest:
            raise NoExistingHashError()
        targets = self._targets.replace_given(
            min_time=min_time,
            min_iterations_log2=min_iterations_log2,
        )

        if algorithm is not None and algorithm != state.algorithm:
            self._require_supported(algorithm)
            if state.plaintext is None:
                raise PlaintextRequiredForRehashError(
                    current_algorithm=state.algorithm,
                    requested_algorithm=algorithm,
                )
            logger.info(
                "rehash_algorithm_switch from_algorithm=%s to_algorithm=%s",
                state.algorithm,
                algorithm,
            )
            state = self._start_chain(algorithm=algorithm, plaintext=state.plaintext)

        self._state = state
        self._targets = targets
        if state.is_calibrated(targets):
            return False

        self._calibrate()
        return True

    def needs_hashing(self) -> bool:
        """Return whether the current state falls short of the current targets."""

        if self._state is None:
            return True
        return self._state.needs_hashing(self._targets)

    def does_match_plaintext(self, candidate_plaintext: bytes) -> bool:
        """Return whether ``candidate_plaintext`` reproduces the stored hash."""

        candidate = bytes(candidate_plaintext)
        state = self._state
        if (
            self._short_circuit_known_plaintext
            and state is not None
            and is_known_plaintext(state, candidate)
        ):
            return True
        if state is None or not state.has_digest:
            raise EmptyHashError()

        outcome = verify_candidate(
            state,
            candidate,
            digest_fn=self._digest_fn(state.algorithm),
            clock=self._clock.now,
        )
        self._state = outcome.state
        logger.debug(
            (
                "plaintext_verification algorithm=%s iterations_log2=%s "
                "matched=%s elapsed_seconds=%.6f"
            ),
            state.algorithm,
            state.iterations_log2,
            outcome.matched,
            outcome.state.elapsed_time,
        )
        return outcome.matched

    def to_record(self) -> HashRecord:
        state = self._state
        if state is None or not state.has_digest:
            raise EmptyHashError()
        return HashRecord(
            hash=encode_binary(state.digest),
            salt=encode_binary(state.salt),
            algorithm=state.algorithm,
            time=state.elapsed_time,
            iterations_log2=state.iterations_log2,
        )

    def serialize(self) -> str:
        """Return the JSON record for the current state."""

        return self.to_record().model_dump_json()

    def restore_record(self, record: HashRecord) -> None:
        """Load a validated record; plaintext becomes unknown and targets reset."""

        self._require_supported(record.algorithm)
        expected_size = self._digest.digest_size(record.algorithm)
        digest = record.hash_bytes
        salt = record.salt_bytes
        if len(digest) != expected_size or len(salt) != expected_size:
            raise DeserializationError(
                f"hash and salt must be {expected_size} bytes for algorithm '{record.algorithm}'"
            )

        self._state = HashState(
            algorithm=record.algorithm,
            salt=salt,
            digest=digest,
            elapsed_time=record.time,
            iterations_log2=record.iterations_log2,
            plaintext=None,
        )
        self._targets = CalibrationTargets()

    def deserialize(self, payload: str | bytes) -> None:
        """Parse and load a JSON record produced by ``serialize``."""

        try:
            record = HashRecord.model_validate_json(payload)
        except ValidationError as exc:
            raise DeserializationError(
                f"Malformed hash record ({exc.error_count()} validation errors)"
            ) from exc
        self.restore_record(record)

    def _require_supported(self, algorithm: str) -> None:
        if algorithm not in self._digest.supported_algorithms():
            raise UnsupportedAlgorithmError(algorithm=algorithm)

    def _digest_fn(self, algorithm: str) -> DigestFn:
        return partial(self._digest.digest, algorithm)

    def _start_chain(self, *, algorithm: str, plaintext: bytes) -> HashState:
        salt = self._random_source.random_bytes(self._digest.digest_size(algorithm))
        return start_chain(
            algorithm=algorithm,
            salt=salt,
            plaintext=plaintext,
            digest_fn=self._digest_fn(algorithm),
        )

    def _calibrate(self) -> None:
        state = self._state
        if state is None:
            raise NoExistingHashError()

        for state in iter_calibration_rounds(
            state,
            self._targets,
            digest_fn=self._digest_fn(state.algorithm),
            clock=self._clock.now,
        ):
            self._state = state
            logger.debug(
                "calibration_round_complete iterations_log2=%s elapsed_seconds=%.6f",
                state.iterations_log2,
                state.elapsed_time,
            )

        logger.info(
            "calibration_complete algorithm=%s iterations_log2=%s elapsed_seconds=%.3f",
            state.algorithm,
            state.iterations_log2,
            state.elapsed_time,
        )
