"""Commit object builder and history traversal.

This module turns a staging index into a commit object, advances HEAD to it,
and walks the commit graph for the log.
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Deque, List, Mapping, Optional, Set

from loguru import logger

from litvcs.storage.object_store import ObjectStore
from litvcs.storage.objects import Commit
from litvcs.storage.tree_codec import TreeCodec

if TYPE_CHECKING:
    from litvcs.core.refs import RefManager


@dataclass(frozen=True)
class CommitRecord:
    """A commit together with the hash it is stored under."""

    hash: str
    commit: Commit


class CommitBuilder:
    """Builder for creating and reading commit objects.

    A commit records the root tree built from the staging index, the commit
    HEAD pointed at before (if any) and a UTC timestamp. After writing, HEAD
    is nudged forward: the attached branch moves, or a detached HEAD is
    rewritten.

    Attributes:
        object_store: ObjectStore for object storage
        tree_codec: TreeCodec used to build the root tree
        refs: RefManager owning HEAD and the branches
    """

    def __init__(
        self,
        object_store: ObjectStore,
        tree_codec: TreeCodec,
        refs: "RefManager",
    ) -> None:
        self.object_store = object_store
        self.tree_codec = tree_codec
        self.refs = refs

    def create_commit(
        self,
        index: Mapping[str, str],
        message: str,
        timestamp: Optional[datetime] = None,
    ) -> str:
        """Create a commit from a staging index and advance HEAD to it.

        Args:
            index: Mapping of path to blob hash (the staged snapshot)
            message: Commit message
            timestamp: Commit time, defaults to now (UTC)

        Returns:
            Commit hash (SHA-256 hex string)
        """
        tree_hash = self.tree_codec.build_tree(index)

        parent_hash = self.refs.head_commit()
        parents = (parent_hash,) if parent_hash else ()

        commit = Commit(
            name=message,
            tree=tree_hash,
            parents=parents,
            timestamp=timestamp or datetime.now(timezone.utc),
        )
        commit_hash = self.object_store.write_commit(commit)

        self.refs.nudge_head(commit_hash)

        logger.info("Committed {}: {}", commit_hash[:8], message)
        return commit_hash

    def read_commit(self, commit_hash: str) -> Commit:
        """Read a commit object."""
        return self.object_store.read_commit(commit_hash)

    def get_commit_history(
        self,
        start_hash: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[CommitRecord]:
        """Get commit history in reverse chronological order.

        Every commit reachable from ``start_hash`` through parent links is
        listed once. Commits sharing a timestamp keep traversal order, so the
        starting commit comes first.

        Args:
            start_hash: Commit to start from (default: HEAD)
            limit: Maximum number of commits to return

        Returns:
            List of commit records, newest first; empty if there is no commit
        """
        if start_hash is None:
            start_hash = self.refs.head_commit()
        if start_hash is None:
            return []

        records: List[CommitRecord] = []
        seen: Set[str] = {start_hash}
        queue: Deque[str] = deque([start_hash])

        while queue:
            current = queue.popleft()
            commit = self.object_store.read_commit(current)
            records.append(CommitRecord(hash=current, commit=commit))

            for parent in commit.parents:
                if parent not in seen:
                    seen.add(parent)
                    queue.append(parent)

        records.sort(key=lambda record: record.commit.timestamp, reverse=True)

        if limit is not None:
            records = records[:limit]
        return records
