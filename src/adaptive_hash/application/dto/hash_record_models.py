"""Pydantic models for the serialized hash record contract."""

from __future__ import annotations

import base64
import binascii

from pydantic import BaseModel, ConfigDict, Field, field_validator

from adaptive_hash.domain.hash_state import MAX_ITERATIONS_LOG2


class StrictModel(BaseModel):
    """Base model with strict unknown-field rejection."""

    model_config = ConfigDict(extra="forbid")


def encode_binary(value: bytes) -> str:
    """Encode raw bytes as standard padded base64 text."""

    return base64.b64encode(value).decode("ascii")


def decode_binary(value: str) -> bytes:
    """Decode standard base64 text, rejecting characters outside the alphabet."""

    return base64.b64decode(value.encode("ascii"), validate=True)


class HashRecord(StrictModel):
    """Persisted hash state. Plaintext and calibration targets are never stored."""

    hash: str = Field(min_length=1)
    salt: str = Field(min_length=1)
    algorithm: str = Field(min_length=1)
    time: float = Field(ge=0.0, allow_inf_nan=False)
    iterations_log2: int = Field(ge=0, le=MAX_ITERATIONS_LOG2)

    @field_validator("hash", "salt")
    @classmethod
    def _validate_base64(cls, value: str) -> str:
        try:
            decode_binary(value)
        except (binascii.Error, UnicodeEncodeError) as exc:
            raise ValueError("binary fields must be standard base64") from exc
        return value

    @property
    def hash_bytes(self) -> bytes:
        return decode_binary(self.hash)

    @property
    def salt_bytes(self) -> bytes:
        return decode_binary(self.salt)
