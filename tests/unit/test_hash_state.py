from __future__ import annotations

import pytest

from adaptive_hash.domain.errors import InvalidCalibrationTargetError
from adaptive_hash.domain.hash_state import CalibrationTargets, HashState


def _state(*, iterations_log2: int, elapsed_time: float) -> HashState:
    return HashState(
        algorithm="sha256",
        salt=b"\x00" * 32,
        digest=b"\x01" * 32,
        elapsed_time=elapsed_time,
        iterations_log2=iterations_log2,
    )


@pytest.mark.parametrize(
    ("iterations_log2", "elapsed_time", "expected"),
    [
        (3, 0.5, True),
        (4, 1.0, True),
        (2, 5.0, False),
        (10, 0.49, False),
    ],
)
def test_calibration_requires_both_floors(
    iterations_log2: int,
    elapsed_time: float,
    expected: bool,
) -> None:
    targets = CalibrationTargets(min_time=0.5, min_iterations_log2=3)

    state = _state(iterations_log2=iterations_log2, elapsed_time=elapsed_time)

    assert state.is_calibrated(targets) is expected
    assert state.needs_hashing(targets) is not expected


def test_default_targets_are_satisfied_by_any_state() -> None:
    assert _state(iterations_log2=0, elapsed_time=0.0).is_calibrated(CalibrationTargets())


@pytest.mark.parametrize(
    ("min_time", "min_iterations_log2"),
    [
        (-0.1, 0),
        (0.0, -1),
        (True, 0),
        (0.0, 1.5),
        ("1.0", 0),
        (float("nan"), 0),
        (float("inf"), 0),
        (0.0, 41),
    ],
)
def test_invalid_targets_are_rejected(min_time: object, min_iterations_log2: object) -> None:
    with pytest.raises(InvalidCalibrationTargetError):
        CalibrationTargets(
            min_time=min_time,  # type: ignore[arg-type]
            min_iterations_log2=min_iterations_log2,  # type: ignore[arg-type]
        )


def test_integer_min_time_is_normalized_to_float() -> None:
    targets = CalibrationTargets(min_time=2, min_iterations_log2=1)

    assert isinstance(targets.min_time, float)
    assert targets.min_time == 2.0


def test_replace_given_only_overrides_provided_values() -> None:
    targets = CalibrationTargets(min_time=1.5, min_iterations_log2=7)

    assert targets.replace_given() == targets
    assert targets.replace_given(min_time=0.0) == CalibrationTargets(0.0, 7)
    assert targets.replace_given(min_iterations_log2=2) == CalibrationTargets(1.5, 2)


def test_plaintext_is_hidden_from_repr() -> None:
    state = HashState(algorithm="sha256", salt=b"s", digest=b"d", plaintext=b"hunter2")

    assert "hunter2" not in repr(state)
    assert state.knows_plaintext is True
    assert state.has_digest is True
