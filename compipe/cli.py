#!/usr/bin/env python3
"""
compipe CLI - run the compiler and print its artifact on stdout.

Usage:
    compipe <input_file>

The exit status is 0 on success, the compiler's own status when it fails,
and 1 for usage errors, configuration errors and artifact read failures.
"""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Sequence
from typing import NoReturn

from .config import DriverConfig
from .driver import Driver
from .exceptions import ConfigError, UsageError
from .log import LoggerFactory
from .output import StreamOutput

PROG = "compipe"
USAGE = f"usage: {PROG} <input_file>"

# Generic failure status for driver-side errors
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class _ArgumentParser(argparse.ArgumentParser):
    """Parser reporting problems as UsageError instead of exiting with 2."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog=PROG, usage=USAGE[len("usage: ") :], add_help=False)
    parser.add_argument("input_file", nargs="*", help="Source file to compile")
    return parser


def parse_args(argv: Sequence[str]) -> str:
    """
    Extract the single input path from the command line.

    Raises:
        UsageError: If the path is missing, or more than one is given
    """
    args = _build_parser().parse_args(list(argv))
    if not args.input_file:
        raise UsageError("missing input file")
    if len(args.input_file) > 1:
        raise UsageError("expected exactly one input file")
    return str(args.input_file[0])


def _error(message: str) -> None:
    print(f"error: {message}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    """
    Run the driver and return the process exit status.

    Args:
        argv: Command-line arguments without the program name
    """
    if argv is None:
        argv = sys.argv[1:]

    try:
        input_path = parse_args(argv)
    except UsageError as e:
        _error(str(e))
        print(USAGE, file=sys.stderr)
        return EXIT_FAILURE

    try:
        config = DriverConfig.load()
    except ConfigError as e:
        _error(str(e))
        return EXIT_FAILURE

    lg = LoggerFactory.create_root(config.log)
    if config.source is not None:
        lg.debug("loaded config", extra={"path": str(config.source)})

    outcome = Driver(config, lg).run(input_path, StreamOutput())
    if outcome.diagnostic:
        _error(outcome.diagnostic)
    return outcome.exit_code


def _silence_stdout() -> None:
    """Point stdout at devnull so interpreter shutdown does not fail again."""
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def entry_point() -> NoReturn:
    """CLI entry point"""
    try:
        code = main()
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        code = EXIT_INTERRUPTED
    except BrokenPipeError:
        # Reader of our stdout went away
        _silence_stdout()
        code = EXIT_FAILURE
    sys.exit(code)


if __name__ == "__main__":
    entry_point()
