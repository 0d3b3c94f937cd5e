"""Command-line front door for mdcombine.

Resolves ``--src``/``--out``/``--policy`` from the argument vector, runs the
combine pipeline, and maps failures to a message and exit status.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from .combine import CombineRequest, combine
from .errors import CombineError
from .selection import POLICIES, get_policy
from .types import DEFAULT_OUTPUT, DEFAULT_POLICY, DEFAULT_SOURCE, CombineArguments

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
LOG_FORMAT = "%(levelname)s: %(message)s"
INFO_FORMAT = "%(message)s"
VALUE_FLAGS = ("--src", "--out", "--policy")
HELP_FLAGS = ("-h", "--help")

_CLI_HANDLER: logging.Handler | None = None


def arg_value(argv: Sequence[str], flag: str, default: str) -> str:
    """Return the token after the first ``flag`` in ``argv``.

    Falls back to ``default`` when the flag is absent or is the last token.
    The value is not validated.
    """
    try:
        index = list(argv).index(flag)
    except ValueError:
        return default
    if index + 1 < len(argv):
        return argv[index + 1]
    return default


class _LevelPrefixFormatter(logging.Formatter):
    """Bare messages below WARNING, ``LEVEL: message`` from WARNING up."""

    def __init__(self) -> None:
        super().__init__(LOG_FORMAT)
        self._info_formatter = logging.Formatter(INFO_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno < logging.WARNING:
            return self._info_formatter.format(record)
        return super().format(record)


def _help_requested(argv: Sequence[str]) -> bool:
    """Return whether a help flag appears outside a flag value position."""
    tokens = list(argv)
    value_positions = {tokens.index(flag) + 1 for flag in VALUE_FLAGS if flag in tokens}
    return any(token in HELP_FLAGS and index not in value_positions for index, token in enumerate(tokens))


def _build_parser() -> argparse.ArgumentParser:
    """Parser used for ``--help`` output only; values come from ``arg_value``."""
    policy_help = "; ".join(f"{name}: {policy.description}" for name, policy in POLICIES.items())
    parser = argparse.ArgumentParser(
        prog="mdcombine",
        description="Combine the text files under a directory into one markdown document.",
        allow_abbrev=False,
    )
    parser.add_argument("--src", nargs="?", metavar="PATH", help="Root directory to search (default: current directory).")
    parser.add_argument("--out", nargs="?", metavar="PATH", help=f"Output file path (default: {DEFAULT_OUTPUT}).")
    parser.add_argument(
        "--policy",
        nargs="?",
        metavar="NAME",
        help=f"Selection policy (default: {DEFAULT_POLICY}). {policy_help}.",
    )
    return parser


def parse_arguments(argv: Sequence[str]) -> CombineArguments:
    """Resolve flag values from ``argv``; unknown tokens are ignored.

    ``-h``/``--help`` prints usage and exits through ``SystemExit(0)`` unless
    it is the value of another flag, as in ``--src -h``.
    """
    if _help_requested(argv):
        _build_parser().print_help()
        raise SystemExit(0)
    return CombineArguments(
        src=arg_value(argv, "--src", DEFAULT_SOURCE),
        out=arg_value(argv, "--out", DEFAULT_OUTPUT),
        policy=arg_value(argv, "--policy", DEFAULT_POLICY),
    )


def resolve_request(arguments: CombineArguments, cwd: Path) -> CombineRequest:
    """Resolve argument paths against ``cwd`` and look up the policy."""
    return CombineRequest(
        source=(cwd / arguments.src).resolve(),
        output=(cwd / arguments.out).resolve(),
        policy=get_policy(arguments.policy),
    )


def run(argv: Sequence[str], cwd: Path) -> int:
    """Run the combine pipeline and return the process exit status."""
    try:
        request = resolve_request(parse_arguments(argv), cwd)
        combine(request)
    except (CombineError, OSError) as exc:
        logger.error("An error occurred: %s", exc)
        return EXIT_FAILURE
    except Exception as exc:
        logger.error("An unknown error occurred. %r", exc)
        logger.debug("Unhandled exception", exc_info=True)
        return EXIT_FAILURE
    return EXIT_OK


def configure_logging(stream: TextIO | None = None, level: int = logging.INFO) -> logging.Logger:
    """Attach one stream handler to the ``mdcombine`` logger.

    Calling again replaces the handler rather than stacking another one.
    """
    global _CLI_HANDLER

    package_logger = logging.getLogger("mdcombine")
    if _CLI_HANDLER is not None:
        package_logger.removeHandler(_CLI_HANDLER)
    _CLI_HANDLER = logging.StreamHandler(stream if stream is not None else sys.stderr)
    _CLI_HANDLER.setFormatter(_LevelPrefixFormatter())
    package_logger.addHandler(_CLI_HANDLER)
    package_logger.setLevel(level)
    package_logger.propagate = False
    return package_logger


def main(argv: Sequence[str] | None = None, cwd: Path | None = None) -> None:
    """Parse CLI arguments and combine files.

    ``argv`` and ``cwd`` default to the process arguments and working
    directory; tests pass them explicitly. Exits non-zero on failure.
    """
    if argv is None:
        argv = sys.argv[1:]
    if cwd is None:
        cwd = Path.cwd()
    configure_logging()
    status = run(argv, cwd)
    if status != EXIT_OK:
        raise SystemExit(status)


if __name__ == "__main__":
    main()
