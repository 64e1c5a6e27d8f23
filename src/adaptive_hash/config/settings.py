"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from adaptive_hash.domain.hash_state import (
    DEFAULT_ALGORITHM,
    DEFAULT_MIN_ITERATIONS_LOG2,
    DEFAULT_MIN_TIME,
    MAX_ITERATIONS_LOG2,
)

NonEmptyStr = Annotated[str, Field(min_length=1)]
NonNegativeFloat = Annotated[float, Field(ge=0.0, allow_inf_nan=False)]
IterationsLog2 = Annotated[int, Field(ge=0, le=MAX_ITERATIONS_LOG2)]


class Settings(BaseSettings):
    """Environment-driven hashing policy settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    algorithm: NonEmptyStr = Field(
        default=DEFAULT_ALGORITHM,
        validation_alias="ADAPTIVE_HASH_ALGORITHM",
    )
    min_time: NonNegativeFloat = Field(
        default=DEFAULT_MIN_TIME,
        validation_alias="ADAPTIVE_HASH_MIN_TIME",
    )
    min_iterations_log2: IterationsLog2 = Field(
        default=DEFAULT_MIN_ITERATIONS_LOG2,
        validation_alias="ADAPTIVE_HASH_MIN_ITERATIONS_LOG2",
    )
    short_circuit_known_plaintext: bool = Field(
        default=True,
        validation_alias="ADAPTIVE_HASH_SHORT_CIRCUIT_KNOWN_PLAINTEXT",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()
