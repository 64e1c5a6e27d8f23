"""Immutable hash state and calibration target value types."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from adaptive_hash.domain.errors import InvalidCalibrationTargetError

DEFAULT_ALGORITHM = "sha512"
DEFAULT_MIN_TIME = 2.0
DEFAULT_MIN_ITERATIONS_LOG2 = 17
# Upper bound on the doubling exponent accepted from callers and stored records.
MAX_ITERATIONS_LOG2 = 40


@dataclass(frozen=True)
class CalibrationTargets:
    """Minimum work a hash state must reach before calibration is satisfied."""

    min_time: float = 0.0
    min_iterations_log2: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.min_time, bool) or not isinstance(self.min_time, int | float):
            raise InvalidCalibrationTargetError("min_time must be a number of seconds")
        if not math.isfinite(self.min_time):
            raise InvalidCalibrationTargetError("min_time must be finite")
        if self.min_time < 0:
            raise InvalidCalibrationTargetError("min_time cannot be negative")
        if isinstance(self.min_iterations_log2, bool) or not isinstance(
            self.min_iterations_log2, int
        ):
            raise InvalidCalibrationTargetError("min_iterations_log2 must be an integer")
        if self.min_iterations_log2 < 0:
            raise InvalidCalibrationTargetError("min_iterations_log2 cannot be negative")
        if self.min_iterations_log2 > MAX_ITERATIONS_LOG2:
            raise InvalidCalibrationTargetError(
                f"min_iterations_log2 cannot exceed {MAX_ITERATIONS_LOG2}"
            )
        object.__setattr__(self, "min_time", float(self.min_time))

    def replace_given(
        self,
        *,
        min_time: float | None = None,
        min_iterations_log2: int | None = None,
    ) -> CalibrationTargets:
        """Return targets with each provided value replacing the current one."""

        return CalibrationTargets(
            min_time=self.min_time if min_time is None else min_time,
            min_iterations_log2=(
                self.min_iterations_log2 if min_iterations_log2 is None else min_iterations_log2
            ),
        )


@dataclass(frozen=True)
class HashState:
    """Accumulated digest chain for one (algorithm, salt, plaintext) combination.

    ``iterations_log2`` counts completed doubling rounds. The stored ``digest``
    is always the digest applied ``2 ** iterations_log2`` times to
    ``salt + plaintext`` once the chain has been started.
    """

    algorithm: str
    salt: bytes = field(repr=False)
    digest: bytes = field(default=b"", repr=False)
    elapsed_time: float = 0.0
    iterations_log2: int = 0
    plaintext: bytes | None = field(default=None, repr=False, compare=False)

    @property
    def has_digest(self) -> bool:
        return bool(self.digest)

    @property
    def knows_plaintext(self) -> bool:
        return self.plaintext is not None

    def is_calibrated(self, targets: CalibrationTargets) -> bool:
        """Return whether both iteration and time floors are reached."""

        return (
            self.iterations_log2 >= targets.min_iterations_log2
            and self.elapsed_time >= targets.min_time
        )

    def needs_hashing(self, targets: CalibrationTargets) -> bool:
        return not self.is_calibrated(targets)
