"""adaptive hash command-line entrypoint."""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from collections.abc import Sequence
from typing import TextIO

from adaptive_hash.config.settings import Settings, load_settings
from adaptive_hash.domain.errors import AdaptiveHashError
from adaptive_hash.infrastructure.logging import configure_logging
from adaptive_hash.infrastructure.security.password_hasher import (
    HasherFactory,
    create_adaptive_hasher,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for every subcommand."""

    parser = argparse.ArgumentParser(
        prog="adaptive-hash",
        description="Create and verify self-calibrating password hashes.",
    )
    subcommands = parser.add_subparsers(dest="command", required=True)

    hash_parser = subcommands.add_parser("hash", help="hash a new password")
    _add_password_source(hash_parser)
    _add_policy_overrides(hash_parser)

    verify_parser = subcommands.add_parser("verify", help="check a password against a record")
    verify_parser.add_argument("record", help="serialized hash record (JSON)")
    _add_password_source(verify_parser)

    rehash_parser = subcommands.add_parser(
        "rehash",
        help="verify a password, then hash further to the current policy",
    )
    rehash_parser.add_argument("record", help="serialized hash record (JSON)")
    _add_password_source(rehash_parser)
    _add_policy_overrides(rehash_parser)

    subcommands.add_parser("algorithms", help="list supported digest algorithms")
    return parser


def _add_password_source(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--stdin",
        action="store_true",
        help="read the password from the first line of standard input",
    )


def _add_policy_overrides(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--algorithm", default=None)
    parser.add_argument("--min-time", type=float, default=None)
    parser.add_argument("--min-iterations-log2", type=int, default=None)


def _read_password(*, from_stdin: bool, stdin: TextIO) -> str:
    if from_stdin:
        return stdin.readline().rstrip("\r\n")
    return getpass.getpass("Password: ")


def run(
    argv: Sequence[str] | None = None,
    *,
    settings: Settings | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
    hasher_factory: HasherFactory | None = None,
) -> int:
    """Execute one CLI command and return its process exit code."""

    args = build_parser().parse_args(argv)
    resolved_settings = settings or load_settings()
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    if hasher_factory is None:
        hasher = create_adaptive_hasher(
            short_circuit_known_plaintext=resolved_settings.short_circuit_known_plaintext,
        )
    else:
        hasher = hasher_factory()

    if args.command == "algorithms":
        for name in sorted(hasher.supported_algorithms()):
            print(name, file=stdout)
        return EXIT_OK

    algorithm = getattr(args, "algorithm", None) or resolved_settings.algorithm
    min_time = getattr(args, "min_time", None)
    min_iterations_log2 = getattr(args, "min_iterations_log2", None)
    if min_time is None:
        min_time = resolved_settings.min_time
    if min_iterations_log2 is None:
        min_iterations_log2 = resolved_settings.min_iterations_log2

    password = _read_password(from_stdin=args.stdin, stdin=stdin).encode("utf-8")
    try:
        if args.command == "hash":
            print(
                hasher.create_from_plaintext(
                    password,
                    algorithm=algorithm,
                    min_time=min_time,
                    min_iterations_log2=min_iterations_log2,
                ),
                file=stdout,
            )
            return EXIT_OK

        hasher.deserialize(args.record)
        if not hasher.does_match_plaintext(password):
            logger.info("cli_password_mismatch command=%s", args.command)
            return EXIT_MISMATCH
        if args.command == "verify":
            return EXIT_OK

        previous_algorithm = hasher.state.algorithm if hasher.state is not None else None
        hashed_further = hasher.continue_hashing(
            algorithm=algorithm,
            min_time=min_time,
            min_iterations_log2=min_iterations_log2,
        )
        switched = hasher.state is not None and hasher.state.algorithm != previous_algorithm
        if hashed_further or switched:
            print(hasher.serialize(), file=stdout)
        else:
            print(args.record, file=stdout)
        return EXIT_OK
    except AdaptiveHashError as exc:
        print(f"error: {exc}", file=stderr)
        return EXIT_ERROR


def main() -> None:
    """Configure logging from settings and run the CLI."""

    settings = load_settings()
    configure_logging(level=settings.log_level)
    raise SystemExit(run(settings=settings))


if __name__ == "__main__":
    main()
