"""Shared logging configuration for hashing entrypoints."""

from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def resolve_log_level(level: str) -> int:
    """Map a level name to a logging constant, falling back to INFO."""

    normalized_level = level.strip().upper() if level.strip() else "INFO"
    resolved_level = getattr(logging, normalized_level, logging.INFO)
    if not isinstance(resolved_level, int):
        return logging.INFO
    return resolved_level


def configure_logging(*, level: str) -> None:
    """Send process logs to stderr so stdout stays reserved for hash records."""

    logging.basicConfig(
        level=resolve_log_level(level),
        format=_LOG_FORMAT,
        stream=sys.stderr,
    )
