"""
Detects which encoder backends are installed on the host and picks one for the run.

Backends are probed in a fixed priority order: the platform-native `sips`
(macOS) first, then ImageMagick, then FFmpeg. The first one found wins. The
choice is made once per run; a backend that disappears afterwards shows up as
per-file invocation failures, never as a new resolution.
"""
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

from loguru import logger

from ..config.image import (
    FFMPEG_EXECUTABLE,
    FFMPEG_VERSION_ARGS,
    IMAGEMAGICK_EXECUTABLE,
    IMAGEMAGICK_LEGACY_EXECUTABLE,
    IMAGEMAGICK_VERSION_ARGS,
    PROBE_TIMEOUT,
    SIPS_EXECUTABLE,
    SIPS_VERSION_ARGS,
)
from ..domain.models import Encoder, EncoderId

BACKEND_PRIORITY: Tuple[EncoderId, ...] = (
    EncoderId.SIPS,
    EncoderId.IMAGEMAGICK,
    EncoderId.FFMPEG,
)

# EncoderId -> (executable names in the order tried, version probe arguments)
_BACKEND_EXECUTABLES: Dict[EncoderId, Tuple[Tuple[str, ...], Sequence[str]]] = {
    EncoderId.SIPS: ((SIPS_EXECUTABLE,), SIPS_VERSION_ARGS),
    EncoderId.IMAGEMAGICK: (
        (IMAGEMAGICK_EXECUTABLE,)
        if sys.platform == "win32"
        else (IMAGEMAGICK_EXECUTABLE, IMAGEMAGICK_LEGACY_EXECUTABLE),
        IMAGEMAGICK_VERSION_ARGS,
    ),
    EncoderId.FFMPEG: ((FFMPEG_EXECUTABLE,), FFMPEG_VERSION_ARGS),
}


def _exe_name(name: str) -> str:
    return f"{name}.exe" if sys.platform == "win32" else name


def find_executable(name: str, tools_dir: Optional[Path] = None) -> Optional[str]:
    """
    Locates an executable, preferring the configured tools directory.

    If `tools_dir` is set and contains the executable, that copy is used.
    Otherwise the system PATH is searched.

    Args:
        name: The executable name without platform suffix (e.g. "ffmpeg").
        tools_dir: Optional directory from `config.user.yaml` to search first.

    Returns:
        The path to the executable, or None if it cannot be found.
    """
    exe_name = _exe_name(name)
    if tools_dir and tools_dir.is_dir():
        configured_path = tools_dir / exe_name
        if configured_path.is_file():
            logger.debug(f"Using {name} from configured path: '{configured_path}'")
            return str(configured_path)
        logger.debug(f"'{exe_name}' not found in '{tools_dir}'. Falling back to system PATH.")
    return shutil.which(name)


def _probe_executable(encoder_id: EncoderId, executable: str, version_args: Sequence[str]) -> bool:
    try:
        result = subprocess.run(
            [executable, *version_args],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=PROBE_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        # It started, so it exists; a hung version flag is not our concern.
        logger.warning(f"Backend {encoder_id.value}: version probe timed out, assuming available.")
        return True
    except OSError as e:
        logger.debug(f"Backend {encoder_id.value}: '{executable}' could not be started: {e}")
        return False

    first_line = next(iter((result.stdout or result.stderr or "").splitlines()), "")
    logger.debug(f"Backend {encoder_id.value} found at '{executable}' (rc={result.returncode}): {first_line}")
    return True


def probe_backend(encoder_id: EncoderId, tools_dir: Optional[Path] = None) -> Optional[Encoder]:
    """
    Checks whether a single backend is available.

    The executable must be found, and a version probe must be spawnable. The
    probe's exit code is not checked (`sips` for instance has no stable version
    flag across macOS releases); only a failure to start the process at all
    disqualifies the backend. A backend with several executable names (ImageMagick
    7 `magick`, ImageMagick 6 `convert`) uses the first one that passes.

    Args:
        encoder_id: The backend to check.
        tools_dir: Optional directory to search before the system PATH.

    Returns:
        The resolved `Encoder`, or None if the backend is unavailable.
    """
    names, version_args = _BACKEND_EXECUTABLES[encoder_id]
    for name in names:
        executable = find_executable(name, tools_dir)
        if not executable:
            logger.debug(f"Backend {encoder_id.value}: '{name}' not found.")
            continue
        if _probe_executable(encoder_id, executable, version_args):
            return Encoder(encoder_id, executable)
    return None


def resolve_encoder(tools_dir: Optional[Path] = None) -> Optional[Encoder]:
    """
    Picks the encoder for this run.

    Args:
        tools_dir: Optional directory to search before the system PATH.

    Returns:
        The first available backend in `BACKEND_PRIORITY` order, or None when
        no backend is installed.
    """
    for encoder_id in BACKEND_PRIORITY:
        encoder = probe_backend(encoder_id, tools_dir)
        if encoder:
            logger.info(f"Using encoder backend: {encoder}")
            return encoder
    logger.error(
        "No encoder backend found. Install one of: "
        + ", ".join(name for i in BACKEND_PRIORITY for name in _BACKEND_EXECUTABLES[i][0])
        + " (or set 'paths.tools_dir' in config.user.yaml)."
    )
    return None
