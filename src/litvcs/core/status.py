"""Three-way drift between the working tree, the staging index and HEAD.

Unstaged drift compares the working tree to the index, staged drift compares
the index to the tree of the commit HEAD resolves to. Files present in the
working tree but absent from the index are reported separately as untracked.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Tuple

from litvcs.core.refs import RefManager
from litvcs.core.workspace import iter_workspace_files
from litvcs.exceptions import StorageIOError
from litvcs.storage.object_store import ObjectStore, compute_hash
from litvcs.storage.tree_codec import TreeCodec


class ChangeType(str, Enum):
    """Kind of drift recorded for a path."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    # Reserved; no comparison produces it.
    RENAMED = "renamed"


@dataclass
class StatusReport:
    """Combined drift between the three snapshots.

    Attributes:
        unstaged: Working tree vs. index (Modified or Deleted)
        staged: Index vs. HEAD commit (Created, Modified or Deleted)
        untracked: Working-tree files unknown to the index, sorted
    """

    unstaged: Dict[str, ChangeType] = field(default_factory=dict)
    staged: Dict[str, ChangeType] = field(default_factory=dict)
    untracked: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        """True if anything is staged or modified but not yet committed."""
        return bool(self.unstaged or self.staged)

    @property
    def is_clean(self) -> bool:
        return not self.has_changes and not self.untracked


def compare_snapshots(
    base: Mapping[str, str],
    target: Mapping[str, str],
) -> Dict[str, ChangeType]:
    """Classify how ``target`` differs from ``base``.

    Args:
        base: Older snapshot (path -> hash)
        target: Newer snapshot (path -> hash)

    Returns:
        Mapping of path to CREATED (only in target), MODIFIED (hash differs)
        or DELETED (only in base)
    """
    changes: Dict[str, ChangeType] = {}

    for path, base_hash in base.items():
        target_hash = target.get(path)
        if target_hash is None:
            changes[path] = ChangeType.DELETED
        elif target_hash != base_hash:
            changes[path] = ChangeType.MODIFIED

    for path in target:
        if path not in base:
            changes[path] = ChangeType.CREATED

    return changes


class DiffEngine:
    """Computes unstaged, staged and untracked drift for a repository.

    Attributes:
        workspace_root: Root directory of the working tree
        object_store: ObjectStore holding HEAD's commit and trees
        refs: RefManager used to resolve HEAD
        tree_codec: TreeCodec used to flatten HEAD's tree
    """

    def __init__(
        self,
        workspace_root: Path,
        object_store: ObjectStore,
        refs: RefManager,
        tree_codec: TreeCodec,
    ) -> None:
        self.workspace_root = Path(workspace_root)
        self.object_store = object_store
        self.refs = refs
        self.tree_codec = tree_codec

    def unstaged_changes(
        self, staged: Mapping[str, str]
    ) -> Tuple[Dict[str, ChangeType], List[str]]:
        """Compare the working tree against the index.

        Args:
            staged: Current index (path -> blob hash)

        Returns:
            Tuple of (changes, untracked). Changes map paths to MODIFIED or
            DELETED; untracked lists working-tree files absent from the index.

        Raises:
            StorageIOError: If a working-tree file cannot be read
        """
        remaining = dict(staged)
        changes: Dict[str, ChangeType] = {}
        untracked: List[str] = []

        for rel_path in iter_workspace_files(self.workspace_root):
            try:
                content = (self.workspace_root / rel_path).read_bytes()
            except OSError as e:
                raise StorageIOError(f"Failed to read {rel_path}: {e}") from e

            index_hash = remaining.pop(rel_path, None)
            if index_hash is None:
                untracked.append(rel_path)
            elif compute_hash(content) != index_hash:
                changes[rel_path] = ChangeType.MODIFIED

        # Whatever the walk did not visit has disappeared from disk
        for rel_path in remaining:
            changes[rel_path] = ChangeType.DELETED

        return changes, untracked

    def head_snapshot(self) -> Dict[str, str]:
        """Flattened tree of the HEAD commit, empty if there is no commit yet."""
        head_hash = self.refs.head_commit()
        if head_hash is None:
            return {}
        commit = self.object_store.read_commit(head_hash)
        return self.tree_codec.flatten_tree(commit.tree)

    def staged_changes(self, staged: Mapping[str, str]) -> Dict[str, ChangeType]:
        """Compare the index against the HEAD commit's tree."""
        if self.refs.head_commit() is None:
            return {path: ChangeType.CREATED for path in staged}
        return compare_snapshots(self.head_snapshot(), staged)

    def get_status(self, staged: Mapping[str, str]) -> StatusReport:
        """Compute the full status.

        Args:
            staged: Current index (path -> blob hash)

        Returns:
            StatusReport with unstaged, staged and untracked drift
        """
        staged = dict(staged)
        unstaged, untracked = self.unstaged_changes(staged)
        return StatusReport(
            unstaged=unstaged,
            staged=self.staged_changes(staged),
            untracked=sorted(untracked),
        )
