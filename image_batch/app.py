"""
Entry point of the batch image converter.

`main` parses the arguments, configures logging, runs the pipeline and turns
its outcome into terminal output and an exit code. It is the only place that
decides the exit code; the pipeline itself just returns a `RunOutcome`.
"""
import sys
from typing import Optional, Sequence

from loguru import logger

from .cli import USAGE, get_args
from .config.common import LOGGER_FORMAT
from .domain.exceptions import InputPathMissingException
from .domain.models import RunOutcome
from .pipeline.conversion_pipeline import ConversionPipeline
from .services.report_service import format_failures, format_summary


def configure_logger(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOGGER_FORMAT)


def print_outcome(outcome: RunOutcome) -> None:
    """Prints the summary line to stdout and any failures to stderr."""
    if isinstance(outcome.error, InputPathMissingException):
        print(f"Usage: {USAGE}", file=sys.stderr)
        return
    if outcome.report is None:
        return
    print(format_summary(outcome.report))
    for line in format_failures(outcome.report):
        print(line, file=sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Runs a conversion from the command line.

    Returns:
        0 if every file was converted, 1 on a configuration error or if at
        least one file failed.
    """
    args = get_args(argv)
    configure_logger(args.log_level)
    logger.debug(f"Parsed arguments: {args}")

    pipeline = ConversionPipeline(
        args.input_dir,
        output_dir=args.output,
        workers=args.workers,
        timeout=args.timeout,
        report_path=args.report,
    )
    outcome = pipeline.run()
    print_outcome(outcome)

    if outcome.exit_code == 0:
        logger.success("Conversion finished.")
    return outcome.exit_code


if __name__ == "__main__":
    sys.exit(main())
