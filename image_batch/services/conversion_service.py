"""
Converts source images to WebP with the encoder chosen for the run.

For every file this service computes the mirrored destination path, creates
the destination directory, runs the encoder and records the outcome. Each
file is isolated: whatever goes wrong while converting one file ends up as a
`ConversionFailure` for that file and never affects another one.

Conversions run one after another by default. With more than one worker they
run in a bounded thread pool; results are still returned in dispatch order.
"""

import concurrent.futures
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from ..config.common import BUILTIN_TIMEOUT
from ..config.image import FFMPEG_QUALITY, IMAGEMAGICK_QUALITY, TARGET_EXTENSION, TARGET_FORMAT
from ..domain.exceptions import ConversionException
from ..domain.models import (
    ConversionFailure,
    ConversionOutcome,
    ConversionSuccess,
    ConversionTask,
    Encoder,
    EncoderId,
    FileRecord,
)
from ..utils.process_utils import run_cmd


def destination_for(
    source: Path,
    input_root: Path,
    output_root: Path,
    target_extension: str = TARGET_EXTENSION,
) -> Path:
    """
    Computes where the converted copy of `source` goes.

    The path of `source` relative to `input_root` is re-rooted under
    `output_root`, and the suffix of the final component is replaced with
    `target_extension`. Only the last suffix is replaced ("a.b.png" becomes
    "a.b.webp"); a file without one gets the target extension appended.
    Directory names are never modified.

    Args:
        source: The absolute source file path.
        input_root: The directory the walk started from.
        output_root: The directory converted files are written under.
        target_extension: The new extension, with its leading dot.

    Returns:
        The destination path.
    """
    relative = FileRecord.from_source(source, input_root).relative
    return output_root / relative.with_suffix(target_extension)


# --- Command Builders ---
# One builder per EncoderId. Each returns the full argument list for a single file.

def _sips_command(executable: str, source: Path, destination: Path) -> List[str]:
    return [executable, "-s", "format", TARGET_FORMAT, str(source), "--out", str(destination)]


def _imagemagick_command(executable: str, source: Path, destination: Path) -> List[str]:
    return [executable, str(source), "-quality", str(IMAGEMAGICK_QUALITY), str(destination)]


def _ffmpeg_command(executable: str, source: Path, destination: Path) -> List[str]:
    # -y: overwrite without prompting, an interactive prompt would hang the run.
    return [
        executable,
        "-y",
        "-hide_banner",
        "-loglevel", "error",
        "-i", str(source),
        "-quality", str(FFMPEG_QUALITY),
        str(destination),
    ]


_COMMAND_BUILDERS: Dict[EncoderId, Callable[[str, Path, Path], List[str]]] = {
    EncoderId.SIPS: _sips_command,
    EncoderId.IMAGEMAGICK: _imagemagick_command,
    EncoderId.FFMPEG: _ffmpeg_command,
}


def build_command(encoder: Encoder, source: Path, destination: Path) -> List[str]:
    """Returns the argument list that converts `source` to `destination` with `encoder`."""
    return _COMMAND_BUILDERS[encoder.id](encoder.executable, source, destination)


def _failure_message(returncode: int, stderr: str, executable: str) -> str:
    message = (stderr or "").strip()
    if message:
        # Keep the report to one line per file; the last line is usually the cause.
        lines = [line.strip() for line in message.splitlines() if line.strip()]
        return " | ".join(lines[-3:])
    return f"{Path(executable).name} exited with code {returncode}"


def convert_file(task: ConversionTask, timeout: Optional[float] = BUILTIN_TIMEOUT) -> ConversionOutcome:
    """
    Runs a single conversion.

    Never raises for problems with the file itself: a destination directory
    that cannot be created, an encoder that cannot be started, a timeout and
    a non-zero exit code all produce a `ConversionFailure`.

    Args:
        task: The source, destination and encoder to use.
        timeout: Seconds the encoder may run before it is killed.

    Returns:
        A `ConversionSuccess` or a `ConversionFailure`.
    """
    try:
        task.destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"Cannot create {task.destination.parent}: {e}")
        return ConversionFailure(task.source, f"Cannot create directory {task.destination.parent}: {e}")

    cmd = build_command(task.encoder, task.source, task.destination)
    try:
        result = run_cmd(cmd, timeout=timeout, show_cmd=True)
    except ConversionException as e:
        logger.warning(f"Conversion failed for {task.source}: {e}")
        return ConversionFailure(task.source, str(e))

    if result.returncode != 0:
        message = _failure_message(result.returncode, result.stderr, task.encoder.executable)
        logger.warning(f"Conversion failed for {task.source}: {message}")
        return ConversionFailure(task.source, message)

    logger.debug(f"Converted {task.source} -> {task.destination}")
    return ConversionSuccess(task.source, task.destination)


def _convert_isolated(task: ConversionTask, timeout: Optional[float]) -> ConversionOutcome:
    try:
        return convert_file(task, timeout)
    except Exception as exc:
        # convert_file handles file-level errors itself; anything reaching
        # here is a bug, still scoped to this one file.
        logger.exception(f"Unexpected error converting {task.source}")
        return ConversionFailure(task.source, f"{type(exc).__name__}: {exc}")


def _make_task(source: Path, input_root: Path, output_root: Path, encoder: Encoder) -> ConversionTask:
    return ConversionTask(
        source=source,
        destination=destination_for(source, input_root, output_root),
        encoder=encoder,
    )


def convert_all(
    files: Iterable[Path],
    input_root: Path,
    output_root: Path,
    encoder: Encoder,
    workers: int = 1,
    timeout: Optional[float] = BUILTIN_TIMEOUT,
) -> Tuple[List[ConversionSuccess], List[ConversionFailure]]:
    """
    Converts every file and splits the outcomes into successes and failures.

    Both lists follow the order of `files`, with or without a worker pool. A
    source whose destination was already claimed by an earlier source is not
    converted and is reported as a failure.

    Args:
        files: The convertible source files, in dispatch order.
        input_root: The directory the walk started from.
        output_root: The directory converted files are written under.
        encoder: The encoder resolved for this run.
        workers: Maximum number of encoder processes running at the same time.
        timeout: Seconds each encoder process may run.

    Returns:
        A `(successes, failures)` tuple.
    """
    tasks = [_make_task(source, input_root, output_root, encoder) for source in files]
    total = len(tasks)
    workers = max(1, workers)
    outcomes: List[Optional[ConversionOutcome]] = [None] * total

    # Sources differing only by extension ("a.png", "a.jpg") share a
    # destination; the first one in dispatch order keeps it.
    claimed: Dict[Path, Path] = {}
    pending: List[int] = []
    for i, task in enumerate(tasks):
        first_source = claimed.setdefault(task.destination, task.source)
        if first_source == task.source:
            pending.append(i)
            continue
        message = f"destination {task.destination} already produced by {first_source}"
        logger.warning(f"Skipping {task.source}: {message}")
        outcomes[i] = ConversionFailure(task.source, message)

    if workers == 1 or len(pending) <= 1:
        for i in pending:
            task = tasks[i]
            logger.info(f"[{i + 1}/{total}] {task.source.name}")
            outcomes[i] = _convert_isolated(task, timeout)
    else:
        logger.info(f"Converting {len(pending)} file(s) with {workers} worker thread(s).")
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="convert"
        ) as executor:
            futures = {
                executor.submit(_convert_isolated, tasks[i], timeout): i
                for i in pending
            }
            # Outcomes are stored by submission index, so the final order does
            # not depend on which worker finishes first.
            for done, future in enumerate(concurrent.futures.as_completed(futures), start=1):
                i = futures[future]
                outcomes[i] = future.result()
                logger.info(f"[{done}/{len(pending)}] {tasks[i].source.name}")

    successes: List[ConversionSuccess] = []
    failures: List[ConversionFailure] = []
    for outcome in outcomes:
        if isinstance(outcome, ConversionSuccess):
            successes.append(outcome)
        else:
            failures.append(outcome)
    return successes, failures
