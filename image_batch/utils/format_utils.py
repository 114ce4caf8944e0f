"""
This module contains helper functions for formatting data into human-readable strings.
They are used mainly in log messages and in the run report.
"""

from datetime import timedelta
from pathlib import Path
from typing import Iterable


def format_timedelta(td_object: timedelta) -> str:
    """
    Formats a timedelta object into a "HH:MM:SS" string.

    Args:
        td_object: The timedelta object to format.

    Returns:
        A string in HH:MM:SS format, e.g. 7261 seconds becomes "02:01:01".
        Returns "00:00:00" if the input is not a timedelta.
    """
    if not isinstance(td_object, timedelta):
        return "00:00:00"

    total_seconds = int(td_object.total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02}:{minutes:02}:{seconds:02}"


def formatted_size(size_bytes: float) -> str:
    """
    Converts a size in bytes to a human-readable string (B, KB, MB, GB, TB, PB).

    Args:
        size_bytes: A size in bytes.

    Returns:
        The formatted size, e.g. 1536 becomes "1.50 KB" and 2097152 becomes "2 MB".
    """
    if size_bytes < 0:
        size_bytes = 0

    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    factor = 1024.0

    if size_bytes == 0:
        return "0 B"

    for unit in units:
        if size_bytes < factor:
            if unit == "B":
                return f"{int(size_bytes)} {unit}"
            # "2.00 MB" -> "2 MB"
            return f"{size_bytes:.2f} {unit}".replace(".00", "")
        size_bytes /= factor

    return f"{size_bytes:.2f} {units[-1]}".replace(".00", "")


def contains_any_extensions(file_path_obj: Path, extensions_to_check: Iterable[str]) -> bool:
    """
    Checks if a file's extension is present in a given collection (case-insensitive).

    Only the final suffix counts: "photo.tar.png" has the extension ".png".

    Args:
        file_path_obj: A `pathlib.Path` object for the file to check.
        extensions_to_check: File extensions, with or without the leading dot.

    Returns:
        True if the file's extension is in the collection, False otherwise.
    """
    file_extension = file_path_obj.suffix.lower()
    if not file_extension:
        return False

    normalized_extensions = {
        ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        for ext in extensions_to_check
    }

    return file_extension in normalized_extensions


def total_size(paths: Iterable[Path]) -> int:
    """Sums the sizes of the given files, ignoring any that cannot be stat'ed."""
    size = 0
    for path in paths:
        try:
            size += path.stat().st_size
        except OSError:
            continue
    return size
