"""
Command-Line Interface (CLI) setup for the batch image converter.

This module uses Python's `argparse` to define and parse the command-line
arguments. Defaults for the worker count and timeout come from
`config.user.yaml` when it exists.
"""
import argparse
import sys
from pathlib import Path
from typing import NoReturn, Optional, Sequence

from .config.common import DEFAULT_LOG_LEVEL, DEFAULT_TIMEOUT, DEFAULT_WORKERS, LOG_LEVELS

USAGE = "image-batch <input-directory> [-o OUTPUT]"


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


class _ArgumentParser(argparse.ArgumentParser):
    """Reports usage errors with exit code 1, like every other configuration error."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="image-batch",
        usage=USAGE,
        description="Convert every image under a directory to WebP, mirroring the directory layout.",
    )
    # Optional here so that a missing input is reported by the pipeline as a
    # configuration error, with the full usage line.
    parser.add_argument(
        "input_dir", nargs="?", type=Path, default=None,
        help="Directory to scan for images.",
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output directory (default: <input-directory>/converted_webp).",
    )
    parser.add_argument(
        "--workers", type=_positive_int, default=DEFAULT_WORKERS,
        help="Number of conversions to run at the same time (default: %(default)s).",
    )
    parser.add_argument(
        "--timeout", type=_positive_float, default=DEFAULT_TIMEOUT,
        help="Seconds an encoder may spend on a single file (default: %(default)s).",
    )
    parser.add_argument(
        "--report", type=Path, default=None,
        help="Write a YAML report of the run to this file.",
    )
    parser.add_argument(
        "--log-level", type=str.upper, default=DEFAULT_LOG_LEVEL, choices=LOG_LEVELS,
        help="Set the logging level.",
    )
    return parser


def get_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments.

    Args:
        argv: The arguments to parse. Defaults to `sys.argv[1:]`.

    Returns:
        argparse.Namespace: The parsed arguments.
    """
    return build_parser().parse_args(argv)
