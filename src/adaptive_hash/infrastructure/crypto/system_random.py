"""Salt byte source adapter."""

from __future__ import annotations

import secrets


class SecretsRandomBytes:
    """Random byte source using the operating system CSPRNG."""

    def random_bytes(self, count: int) -> bytes:
        if count < 0:
            raise ValueError("count cannot be negative")
        return secrets.token_bytes(count)
