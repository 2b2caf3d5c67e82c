"""Staging area management for lit.

The staging area (index) holds the full flattened snapshot of what the next
commit will contain. It is stored as a flat JSON object in .lit/index:

    {
        "relative/path/to/file": "<blob sha256>",
        ...
    }
"""

import os
from pathlib import Path
from typing import Dict, List, Mapping, Union

from loguru import logger

from litvcs.constants import INDEX_FILE, LIT_DIR
from litvcs.core.status import ChangeType, DiffEngine
from litvcs.exceptions import (
    NothingToStageError,
    NotARepositoryError,
    ObjectCorruptedError,
    PathOutsideRepositoryError,
    StorageIOError,
)
from litvcs.storage.jsonio import read_json, write_json
from litvcs.storage.object_store import ObjectStore

PathLike = Union[str, Path]


class StagingManager:
    """Manager for the staging area (index).

    Staging is driven by drift: only paths the diff engine reports as
    modified, deleted or untracked are touched, so staging an unchanged path
    is refused rather than rewriting the index.

    Attributes:
        workspace_root: Root directory of the workspace
        index_path: Path to the index file (.lit/index)
        object_store: ObjectStore for blob storage
        diff_engine: DiffEngine used to find changed files
    """

    def __init__(
        self,
        workspace_root: Path,
        object_store: ObjectStore,
        diff_engine: DiffEngine,
    ) -> None:
        """Initialize StagingManager.

        Args:
            workspace_root: Root directory of workspace
            object_store: ObjectStore for blob management
            diff_engine: DiffEngine comparing working tree and index

        Raises:
            NotARepositoryError: If the workspace has no .lit directory
        """
        self.workspace_root = Path(os.path.abspath(workspace_root))
        self.lit_dir = self.workspace_root / LIT_DIR
        self.index_path = self.lit_dir / INDEX_FILE
        self.object_store = object_store
        self.diff_engine = diff_engine

        if not self.lit_dir.exists():
            raise NotARepositoryError(
                f"Not a lit repository (no {LIT_DIR}/ found in {workspace_root})"
            )

    def stage(self, path: PathLike) -> Dict[str, List[str]]:
        """Stage every changed or untracked file at or below ``path``.

        Args:
            path: File or directory, absolute or relative to the workspace
                root; "." stages everything

        Returns:
            Dictionary with statistics:
            {
                "added": ["new_file"],
                "updated": ["modified_file"],
                "removed": ["deleted_file"]
            }

        Raises:
            NothingToStageError: If no drift lies under ``path``
            PathOutsideRepositoryError: If ``path`` escapes the workspace
        """
        target = self.normalize_path(path)

        # Snapshot the current index
        staged = self.get_staged_files()
        unstaged, untracked = self.diff_engine.unstaged_changes(staged)

        stats: Dict[str, List[str]] = {
            "added": [],
            "updated": [],
            "removed": [],
        }

        for rel_path in sorted(unstaged):
            if not self._is_sub_path(target, rel_path):
                continue

            change = unstaged[rel_path]
            if change is ChangeType.MODIFIED:
                staged[rel_path] = self._blobify(rel_path)
                stats["updated"].append(rel_path)
            elif change is ChangeType.DELETED:
                del staged[rel_path]
                stats["removed"].append(rel_path)
            else:
                raise AssertionError(f"Unexpected unstaged change for {rel_path}: {change}")

        for rel_path in untracked:
            if self._is_sub_path(target, rel_path):
                staged[rel_path] = self._blobify(rel_path)
                stats["added"].append(rel_path)

        if not any(stats.values()):
            raise NothingToStageError(f"Nothing to stage at '{target or '.'}'")

        self.set_staged(staged)
        logger.debug(
            "Staged {} added, {} updated, {} removed",
            len(stats["added"]),
            len(stats["updated"]),
            len(stats["removed"]),
        )
        return stats

    def get_staged_files(self) -> Dict[str, str]:
        """Get the index as a mapping of relative path to blob hash."""
        try:
            index = read_json(self.index_path)
        except FileNotFoundError:
            return {}

        if not isinstance(index, dict):
            raise ObjectCorruptedError(f"Corrupted index file: {self.index_path}")
        return {str(path): str(blob_hash) for path, blob_hash in index.items()}

    def set_staged(self, entries: Mapping[str, str]) -> None:
        """Overwrite the index wholesale."""
        write_json(self.index_path, dict(sorted(entries.items())))

    def clear(self) -> None:
        """Reset the index to its empty state."""
        self.set_staged({})

    def is_empty(self) -> bool:
        """Check if staging area is empty."""
        return not self.get_staged_files()

    def normalize_path(self, path: PathLike) -> str:
        """Convert ``path`` to a repository-relative POSIX path.

        Returns:
            The relative path, or "" for the workspace root

        Raises:
            PathOutsideRepositoryError: If the path is outside the workspace
        """
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.workspace_root / candidate
        candidate = Path(os.path.normpath(candidate))

        try:
            rel_path = candidate.relative_to(self.workspace_root)
        except ValueError:
            raise PathOutsideRepositoryError(
                f"Path {path} is outside workspace root {self.workspace_root}"
            ) from None

        rel_str = rel_path.as_posix()
        return "" if rel_str == "." else rel_str

    def _blobify(self, rel_path: str) -> str:
        """Store a working-tree file as a blob and return its hash."""
        try:
            content = (self.workspace_root / rel_path).read_bytes()
        except OSError as e:
            raise StorageIOError(f"Failed to read {rel_path}: {e}") from e
        return self.object_store.write_blob(content)

    @staticmethod
    def _is_sub_path(base: str, candidate: str) -> bool:
        """True if ``candidate`` equals ``base`` or lies below it."""
        if base == "":
            return True
        return candidate == base or candidate.startswith(base + "/")
