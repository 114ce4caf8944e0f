"""
Data structures shared across the conversion pipeline.

Everything here is a plain value: the chosen encoder, a file found during the
walk, a single conversion task, the outcome of that task, and the aggregated
report of a whole run.
"""
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from .exceptions import ConfigurationException


class EncoderId(Enum):
    """The closed set of encoder backends, in no particular order."""

    SIPS = "sips"
    IMAGEMAGICK = "imagemagick"
    FFMPEG = "ffmpeg"


@dataclass(frozen=True)
class Encoder:
    """An encoder backend resolved for the run, and the executable that runs it."""

    id: EncoderId
    executable: str

    def __str__(self) -> str:
        return f"{self.id.value} ({self.executable})"


@dataclass(frozen=True)
class FileRecord:
    """A source file and its location relative to the input root."""

    source: Path
    relative: Path

    @classmethod
    def from_source(cls, source: Path, input_root: Path) -> "FileRecord":
        return cls(source=source, relative=source.relative_to(input_root))


@dataclass(frozen=True)
class ConversionTask:
    source: Path
    destination: Path
    encoder: Encoder


@dataclass(frozen=True)
class ConversionSuccess:
    source: Path
    destination: Path


@dataclass(frozen=True)
class ConversionFailure:
    source: Path
    message: str


ConversionOutcome = Union[ConversionSuccess, ConversionFailure]


@dataclass
class ConversionReport:
    """
    The aggregated result of a conversion run.

    Successes and failures keep the order in which files were dispatched. A
    run with at least one failure is a failed run, however many files were
    converted.
    """

    successes: List[ConversionSuccess] = field(default_factory=list)
    failures: List[ConversionFailure] = field(default_factory=list)
    encoder: Optional[Encoder] = None
    elapsed: Optional[timedelta] = None

    @property
    def success_count(self) -> int:
        return len(self.successes)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def failed(self) -> bool:
        return bool(self.failures)


@dataclass(frozen=True)
class RunOutcome:
    """What a run produced: a report, or the configuration error that stopped it."""

    report: Optional[ConversionReport] = None
    error: Optional[ConfigurationException] = None

    @property
    def exit_code(self) -> int:
        if self.error is not None:
            return 1
        if self.report is None or self.report.failed:
            return 1
        return 0
