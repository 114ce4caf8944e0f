"""
Discovers the files to process under an input directory.

The walk uses an explicit stack instead of recursion so that very deep trees
cannot exhaust the interpreter's call stack. The output directory, when it
lives inside the input tree, is excluded: neither it nor anything under it is
ever listed, so a run never picks up its own output.
"""

import os
from pathlib import Path
from typing import List, Optional, Set

from loguru import logger


def _is_excluded(path: Path, exclude_subtree: Optional[Path]) -> bool:
    if exclude_subtree is None:
        return False
    return path == exclude_subtree or exclude_subtree in path.parents


def walk(root: Path, exclude_subtree: Optional[Path] = None) -> Set[Path]:
    """
    Collects every regular file under `root`.

    Directories that cannot be listed (permission denied, removed during the
    walk, ...) are skipped and logged at DEBUG; they are not errors. Symbolic
    links and special files (sockets, devices, FIFOs) are ignored.

    Args:
        root: The directory to walk.
        exclude_subtree: A directory whose whole subtree is left out.

    Returns:
        The absolute paths of all regular files found. The set has no order.
    """
    root = Path(os.path.abspath(root))
    if exclude_subtree is not None:
        exclude_subtree = Path(os.path.abspath(exclude_subtree))

    files: Set[Path] = set()
    frontier: List[Path] = [root]

    while frontier:
        current = frontier.pop()
        if _is_excluded(current, exclude_subtree):
            continue

        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    full_path = current / entry.name
                    if _is_excluded(full_path, exclude_subtree):
                        logger.trace(f"Skipping output path: {full_path}")
                        continue
                    try:
                        if entry.is_symlink():
                            continue
                        if entry.is_dir(follow_symlinks=False):
                            frontier.append(full_path)
                        elif entry.is_file(follow_symlinks=False):
                            files.add(full_path)
                    except OSError as e:
                        logger.debug(f"Cannot stat {full_path}, skipping: {e}")
        except OSError as e:
            logger.debug(f"Cannot list directory {current}, skipping: {e}")
            continue

    logger.debug(f"Found {len(files)} file(s) under {root}")
    return files
