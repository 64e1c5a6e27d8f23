"""Deterministic digest-chain transitions for calibration and verification."""

from __future__ import annotations

import hmac
from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace

from adaptive_hash.domain.hash_state import CalibrationTargets, HashState

DigestFn = Callable[[bytes], bytes]
ClockFn = Callable[[], float]


@dataclass(frozen=True)
class VerificationOutcome:
    """State after one verification attempt and whether the candidate matched."""

    state: HashState
    matched: bool


def apply_digest_chain(digest_fn: DigestFn, data: bytes, count: int) -> bytes:
    """Feed ``data`` through ``digest_fn`` ``count`` times in sequence."""

    value = data
    for _ in range(count):
        value = digest_fn(value)
    return value


def start_chain(
    *,
    algorithm: str,
    salt: bytes,
    plaintext: bytes,
    digest_fn: DigestFn,
) -> HashState:
    """Start a fresh chain from ``salt + plaintext`` at iterations_log2 zero.

    The chain is primed with a single digest application so that after ``k``
    doubling rounds the digest has been applied exactly ``2 ** k`` times,
    the same amount of work verification performs.
    """

    return HashState(
        algorithm=algorithm,
        salt=salt,
        digest=digest_fn(salt + plaintext),
        elapsed_time=0.0,
        iterations_log2=0,
        plaintext=plaintext,
    )


def run_doubling_round(state: HashState, *, digest_fn: DigestFn, clock: ClockFn) -> HashState:
    """Apply ``2 ** iterations_log2`` more digests and bump the exponent by one."""

    round_size = 1 << state.iterations_log2
    started_at = clock()
    digest = apply_digest_chain(digest_fn, state.digest, round_size)
    round_time = clock() - started_at
    return replace(
        state,
        digest=digest,
        iterations_log2=state.iterations_log2 + 1,
        elapsed_time=state.elapsed_time + round_time,
    )


def iter_calibration_rounds(
    state: HashState,
    targets: CalibrationTargets,
    *,
    digest_fn: DigestFn,
    clock: ClockFn,
) -> Iterator[HashState]:
    """Yield the state after each doubling round until targets are met."""

    while state.needs_hashing(targets):
        state = run_doubling_round(state, digest_fn=digest_fn, clock=clock)
        yield state


def verify_candidate(
    state: HashState,
    candidate: bytes,
    *,
    digest_fn: DigestFn,
    clock: ClockFn,
) -> VerificationOutcome:
    """Recompute the chain for ``candidate`` with a fixed ``2 ** k`` digest count.

    ``elapsed_time`` is overwritten with the cost of this single check rather
    than accumulated.
    """

    started_at = clock()
    candidate_digest = apply_digest_chain(
        digest_fn,
        state.salt + candidate,
        1 << state.iterations_log2,
    )
    check_time = clock() - started_at

    matched = hmac.compare_digest(candidate_digest, state.digest)
    verified = replace(
        state,
        elapsed_time=check_time,
        plaintext=candidate if matched else state.plaintext,
    )
    return VerificationOutcome(state=verified, matched=matched)


def is_known_plaintext(state: HashState, candidate: bytes) -> bool:
    """Return whether ``candidate`` equals the plaintext already known for the state."""

    return state.plaintext is not None and hmac.compare_digest(state.plaintext, candidate)
