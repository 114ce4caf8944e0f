"""
Aggregates conversion outcomes into the report of a run.

`summarize` builds the `ConversionReport`; `format_summary` and
`format_failures` render the lines printed to stdout and stderr. `ReportLog`
optionally writes the same report to disk in YAML, so a run can be inspected
or the failed files retried later.
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml
from loguru import logger

from ..config.common import YAML_DUMP_OPTIONS
from ..domain.models import ConversionFailure, ConversionReport, ConversionSuccess, Encoder
from ..utils.format_utils import format_timedelta, formatted_size, total_size


def summarize(
    successes: Sequence[ConversionSuccess],
    failures: Sequence[ConversionFailure],
    encoder: Optional[Encoder] = None,
    elapsed: Optional[timedelta] = None,
) -> ConversionReport:
    """
    Builds the report of a run.

    The run counts as failed as soon as one file failed, even if every other
    file was converted. Successful conversions stay on disk either way.
    """
    return ConversionReport(
        successes=list(successes),
        failures=list(failures),
        encoder=encoder,
        elapsed=elapsed,
    )


def format_summary(report: ConversionReport) -> str:
    """The single stdout line: how many files were converted."""
    return f"{report.success_count} conversion(s) succeeded."


def format_failures(report: ConversionReport) -> List[str]:
    """
    The stderr lines: a header, then one `- <source>: <message>` line per failure.

    Returns an empty list when nothing failed.
    """
    if not report.failures:
        return []
    lines = [f"{report.failure_count} failure(s):"]
    lines.extend(f"- {failure.source}: {failure.message}" for failure in report.failures)
    return lines


def report_to_dict(report: ConversionReport) -> Dict:
    """Converts a report into plain data suitable for YAML."""
    return {
        "ended_datetime": datetime.now().isoformat(timespec="seconds"),
        "encoder": report.encoder.id.value if report.encoder else None,
        "encoder_executable": report.encoder.executable if report.encoder else None,
        "elapsed": format_timedelta(report.elapsed) if report.elapsed is not None else None,
        "success_count": report.success_count,
        "failure_count": report.failure_count,
        "output_size": formatted_size(total_size(s.destination for s in report.successes)),
        "successes": [
            {"source": str(s.source), "destination": str(s.destination)}
            for s in report.successes
        ],
        "failures": [
            {"source": str(f.source), "message": f.message}
            for f in report.failures
        ],
    }


class ReportLog:
    """
    Writes the report of a run to a YAML file.

    Writing the report is a side channel: an unwritable report path is logged
    and otherwise ignored, it never changes the outcome of the run.
    """

    def __init__(self, log_file_path: Path):
        self.log_file_path: Path = log_file_path.resolve()

    def write(self, report: ConversionReport) -> bool:
        """
        Dumps `report` to the log file, replacing any previous content.

        Returns:
            True if the file was written.
        """
        try:
            self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
            with self.log_file_path.open("w", encoding="utf-8") as f:
                yaml.dump(report_to_dict(report), f, **YAML_DUMP_OPTIONS)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to write report {self.log_file_path}: {e}")
            return False
        logger.info(f"Report written to {self.log_file_path}")
        return True
