"""Error taxonomy for adaptive hash state operations."""

from __future__ import annotations


class AdaptiveHashError(Exception):
    """Base class for every adaptive hashing failure."""


class UnsupportedAlgorithmError(AdaptiveHashError, ValueError):
    """Raised when a digest algorithm is not in the supported set."""

    def __init__(self, *, algorithm: str) -> None:
        self.algorithm = algorithm
        super().__init__(f"Hash algorithm '{algorithm}' isn't supported")


class InvalidCalibrationTargetError(AdaptiveHashError, ValueError):
    """Raised when a calibration target is negative or of the wrong type."""


class EmptyHashError(AdaptiveHashError):
    """Raised when verification is attempted without stored hash material."""

    def __init__(self) -> None:
        super().__init__("Can't compare plaintext without hash")


class NoExistingHashError(AdaptiveHashError):
    """Raised when hashing is continued before any hash was created or loaded."""

    def __init__(self) -> None:
        super().__init__("Can't continue hashing without hash; hash plaintext or deserialize first")


class PlaintextRequiredForRehashError(AdaptiveHashError):
    """Raised when switching algorithm on a state whose plaintext is unknown."""

    def __init__(self, *, current_algorithm: str, requested_algorithm: str) -> None:
        self.current_algorithm = current_algorithm
        self.requested_algorithm = requested_algorithm
        super().__init__(
            f"Can't re-hash from '{current_algorithm}' to '{requested_algorithm}' "
            "without plaintext; compare against plaintext first"
        )


class DeserializationError(AdaptiveHashError, ValueError):
    """Raised when a serialized hash record is malformed."""
