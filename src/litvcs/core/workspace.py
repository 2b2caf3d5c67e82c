"""Working-tree helpers: walking tracked candidates and clearing files."""

import os
from pathlib import Path
from typing import AbstractSet, Iterator

from loguru import logger

from litvcs.constants import LIT_DIR
from litvcs.exceptions import StorageIOError


def iter_workspace_files(workspace_root: Path) -> Iterator[str]:
    """Yield every file below ``workspace_root`` as a POSIX relative path.

    The repository's own metadata directory is skipped entirely. Paths are
    produced in sorted order.
    """
    workspace_root = Path(workspace_root)
    paths = []

    for dirpath, dirnames, filenames in os.walk(workspace_root):
        rel_dir = Path(dirpath).relative_to(workspace_root).as_posix()
        if rel_dir == ".":
            rel_dir = ""
            dirnames[:] = [d for d in dirnames if d != LIT_DIR]

        for filename in filenames:
            paths.append(f"{rel_dir}/{filename}" if rel_dir else filename)

    # os.walk yields a directory's files before its subdirectories
    yield from sorted(paths)


def clear_working_tree(workspace_root: Path, leave_alone: AbstractSet[str]) -> int:
    """Delete every file not listed in ``leave_alone``.

    Any directory that is empty after the pass is removed as well, including
    empty directories that were never tracked. The metadata directory is
    never touched.

    Args:
        workspace_root: Root of the working tree
        leave_alone: POSIX relative paths to keep (the untracked files)

    Returns:
        Number of files removed

    Raises:
        StorageIOError: If a file or directory cannot be removed
    """
    workspace_root = Path(workspace_root)
    removed = 0

    for dirpath, _dirnames, filenames in os.walk(workspace_root, topdown=False):
        current = Path(dirpath)
        rel_dir = current.relative_to(workspace_root).as_posix()
        if rel_dir == LIT_DIR or rel_dir.startswith(LIT_DIR + "/"):
            continue

        for filename in filenames:
            rel_path = filename if rel_dir == "." else f"{rel_dir}/{filename}"
            if rel_path in leave_alone:
                continue
            try:
                (current / filename).unlink()
            except OSError as e:
                raise StorageIOError(f"Failed to remove {rel_path}: {e}") from e
            removed += 1

        if rel_dir != "." and not any(current.iterdir()):
            try:
                current.rmdir()
            except OSError as e:
                raise StorageIOError(f"Failed to remove directory {rel_dir}: {e}") from e

    logger.debug("Cleared {} tracked file(s) from the working tree", removed)
    return removed
