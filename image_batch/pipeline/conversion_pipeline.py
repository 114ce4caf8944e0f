from datetime import datetime
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..config.common import (
    DEFAULT_OUTPUT_DIR_NAME,
    DEFAULT_TIMEOUT,
    DEFAULT_WORKERS,
    TOOLS_DIR,
)
from ..domain.exceptions import (
    ConfigurationException,
    InputNotDirectoryException,
    InputNotFoundException,
    InputPathMissingException,
    NoEncoderAvailableException,
    OutputDirectoryException,
)
from ..domain.models import ConversionReport, Encoder, RunOutcome
from ..services.conversion_service import convert_all
from ..services.encoder_registry import resolve_encoder
from ..services.extension_filter import filter_convertible
from ..services.file_walker import walk
from ..services.report_service import ReportLog, summarize
from ..utils.format_utils import format_timedelta


class ConversionPipeline:
    """
    Runs one batch conversion from input validation to the final report.

    Configuration errors (bad input path, no encoder, unwritable output
    directory) stop the run before any file is touched and are returned in the
    `RunOutcome`. Everything after that is per-file and ends up in the report.
    """

    def __init__(
        self,
        input_dir: Optional[Path],
        output_dir: Optional[Path] = None,
        workers: int = DEFAULT_WORKERS,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        tools_dir: Optional[Path] = TOOLS_DIR,
        output_dir_name: str = DEFAULT_OUTPUT_DIR_NAME,
        report_path: Optional[Path] = None,
    ):
        self.input_dir: Optional[Path] = Path(input_dir).resolve() if input_dir else None
        self.output_dir: Optional[Path] = Path(output_dir).resolve() if output_dir else None
        self.workers = max(1, workers)
        self.timeout = timeout
        self.tools_dir = tools_dir
        self.output_dir_name = output_dir_name
        self.report_path = report_path
        self.encoder: Optional[Encoder] = None

    def _validate_input(self) -> Path:
        if self.input_dir is None:
            raise InputPathMissingException("No input directory given.")
        if not self.input_dir.exists():
            raise InputNotFoundException(f"Input directory not found: {self.input_dir}")
        if not self.input_dir.is_dir():
            raise InputNotDirectoryException(f"Input path must be a directory: {self.input_dir}")
        return self.input_dir

    def _resolve_encoder(self) -> Encoder:
        encoder = resolve_encoder(self.tools_dir)
        if encoder is None:
            raise NoEncoderAvailableException("No encoder backend available (sips, magick or ffmpeg).")
        return encoder

    def _prepare_output_dir(self, input_dir: Path) -> Path:
        output_dir = self.output_dir or input_dir / self.output_dir_name
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryException(f"Cannot create output directory {output_dir}: {e}") from e
        if not output_dir.is_dir():
            raise OutputDirectoryException(f"Output path is not a directory: {output_dir}")
        self.output_dir = output_dir
        return output_dir

    def discover_files(self, input_dir: Path, output_dir: Path) -> List[Path]:
        """Walks the input tree without the output subtree and keeps the convertible files."""
        found = walk(input_dir, exclude_subtree=output_dir)
        convertible = filter_convertible(found)
        logger.info(
            f"Found {len(found)} file(s) under {input_dir}, {len(convertible)} convertible."
        )
        return convertible

    def run(self) -> RunOutcome:
        """
        Executes the run.

        Returns:
            A `RunOutcome` holding either the report or the configuration error.
        """
        started = datetime.now()
        try:
            input_dir = self._validate_input()
            logger.info(f"Input directory: {input_dir}")
            # The encoder is resolved before anything is written, so a host
            # without encoders leaves no output directory behind.
            self.encoder = self._resolve_encoder()
            output_dir = self._prepare_output_dir(input_dir)
            logger.info(f"Output directory: {output_dir}")
        except ConfigurationException as e:
            logger.error(str(e))
            return RunOutcome(error=e)

        files = self.discover_files(input_dir, output_dir)
        if not files:
            logger.info("No convertible files found.")

        successes, failures = convert_all(
            files,
            input_root=input_dir,
            output_root=output_dir,
            encoder=self.encoder,
            workers=self.workers,
            timeout=self.timeout,
        )
        report: ConversionReport = summarize(
            successes, failures, encoder=self.encoder, elapsed=datetime.now() - started
        )
        logger.info(
            f"Finished in {format_timedelta(report.elapsed)}: "
            f"{report.success_count} succeeded, {report.failure_count} failed."
        )

        if self.report_path:
            ReportLog(self.report_path).write(report)

        return RunOutcome(report=report)
