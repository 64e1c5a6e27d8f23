"""Port for password hashing and verification."""

from __future__ import annotations

from typing import Protocol


class PasswordHasherPort(Protocol):
    """Password hashing/verification contract.

    Stored hashes are serialized adaptive hash records: JSON objects with
    base64 ``hash`` and ``salt``, the digest ``algorithm`` name, the measured
    ``time`` in seconds and the completed doubling rounds ``iterations_log2``.
    """

    def hash_password(self, password: str) -> str:
        """Hash plaintext password and return its serialized record."""

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        """Verify plaintext password against a serialized record."""

    def needs_rehash(self, password_hash: str) -> bool:
        """Return whether a serialized record falls short of the current hashing policy."""
