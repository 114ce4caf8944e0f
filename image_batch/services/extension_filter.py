"""
Decides which discovered files are images the converter can handle.

The check looks at the file extension only; file contents are never read.
"""
from pathlib import Path
from typing import Iterable, List

from ..config.image import SUPPORTED_EXTENSIONS
from ..utils.format_utils import contains_any_extensions


def is_convertible(path: Path) -> bool:
    """True if the file's extension is one of the supported image extensions, in any case."""
    return contains_any_extensions(Path(path), SUPPORTED_EXTENSIONS)


def filter_convertible(paths: Iterable[Path]) -> List[Path]:
    """
    Keeps the convertible paths.

    The result is sorted so that the dispatch order is the same on every run
    over the same tree.
    """
    return sorted(p for p in paths if is_convertible(p))
