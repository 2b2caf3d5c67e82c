"""Safe transitions of HEAD between branches and commits."""

from pathlib import Path
from typing import Dict, Iterable, List, Mapping

from loguru import logger

from litvcs.core.refs import HeadState, RefManager
from litvcs.core.staging import StagingManager
from litvcs.core.status import ChangeType, DiffEngine
from litvcs.core.workspace import clear_working_tree
from litvcs.exceptions import (
    NotFoundError,
    UncommittedChangesError,
    UntrackedFilesError,
)
from litvcs.storage.object_store import ObjectStore
from litvcs.storage.tree_codec import TreeCodec


class CheckoutCoordinator:
    """Moves HEAD and rewrites the working tree and index to match.

    A checkout is refused while anything is staged or modified, and also when
    the target commit would overwrite an untracked file (or needs a directory
    where an untracked file sits). All validation happens before the working
    tree is touched; the steps after that (clear, move HEAD, load files,
    rebuild the index) are not transactional.

    Attributes:
        workspace_root: Root directory of the working tree
        object_store: ObjectStore holding the target commit
        tree_codec: TreeCodec used to load the target tree
        refs: RefManager owning HEAD
        diff_engine: DiffEngine for the precondition check
        staging: StagingManager whose index is rebuilt
    """

    def __init__(
        self,
        workspace_root: Path,
        object_store: ObjectStore,
        tree_codec: TreeCodec,
        refs: RefManager,
        diff_engine: DiffEngine,
        staging: StagingManager,
    ) -> None:
        self.workspace_root = Path(workspace_root)
        self.object_store = object_store
        self.tree_codec = tree_codec
        self.refs = refs
        self.diff_engine = diff_engine
        self.staging = staging

    def resolve_target(self, location: str, detach: bool = False) -> HeadState:
        """Turn a user-supplied location into a HEAD state.

        Args:
            location: Branch name or (abbreviated) commit hash
            detach: Point HEAD at the branch's commit instead of the branch

        Returns:
            The HeadState to switch to

        Raises:
            NotFoundError: If neither a branch nor a commit matches
            AmbiguousPrefixError: If the abbreviated hash is ambiguous
        """
        if self.refs.branch_exists(location):
            if detach:
                return HeadState.detached_at(self.refs.read_branch(location))
            return HeadState.attached(location)

        commit_hash = self.object_store.expand_hash(location)
        if commit_hash is None:
            raise NotFoundError(f"No branch or commit matches '{location}'")
        return HeadState.detached_at(commit_hash)

    def checkout(self, location: str, detach: bool = False) -> HeadState:
        """Switch HEAD to ``location`` and load its snapshot.

        Args:
            location: Branch name or (abbreviated) commit hash
            detach: Detach HEAD even if ``location`` is a branch

        Returns:
            The new HEAD state

        Raises:
            NotFoundError: If the location cannot be resolved
            UncommittedChangesError: If there is staged or unstaged drift
            UntrackedFilesError: If the target would overwrite untracked files
            InvalidReferenceError: If the resolved target is not valid
        """
        target = self.resolve_target(location, detach=detach)

        previous_index = self.staging.get_staged_files()
        report = self.diff_engine.get_status(previous_index)

        if report.has_changes:
            logger.warning("Checkout of {} refused: uncommitted changes", location)
            raise UncommittedChangesError(
                "Uncommitted changes; commit them before checking out",
                report=report,
            )

        self.refs.validate_head(target)

        if target.detached:
            target_hash = target.location
        else:
            target_hash = self.refs.read_branch(target.location)
        target_tree = self.object_store.read_commit(target_hash).tree
        collisions = self._untracked_collisions(
            report.untracked, self.tree_codec.flatten_tree(target_tree)
        )
        if collisions:
            logger.warning("Checkout of {} refused: untracked files in the way", location)
            raise UntrackedFilesError(
                "Untracked files would be overwritten by checkout: " + ", ".join(collisions),
                paths=collisions,
            )

        clear_working_tree(self.workspace_root, set(report.untracked))

        self.refs.set_head(target)

        new_commit_hash = self.refs.head_commit()
        if new_commit_hash is None:
            raise AssertionError(f"HEAD resolved to no commit after moving to {target}")
        new_commit = self.object_store.read_commit(new_commit_hash)

        self.tree_codec.materialize(new_commit.tree, self.workspace_root)

        self.staging.set_staged(
            self._rebuild_index(report.staged, previous_index, new_commit.tree)
        )

        logger.info("Checked out {}", target.describe())
        return target

    @staticmethod
    def _untracked_collisions(
        untracked: Iterable[str],
        target_files: Mapping[str, str],
    ) -> List[str]:
        """Untracked paths that loading ``target_files`` would clobber.

        A collision is an untracked file at a path the target defines, an
        untracked file where the target needs a directory, or an untracked
        file below a path the target defines as a file.
        """
        target_dirs = set()
        for path in target_files:
            parts = path.split("/")
            for depth in range(1, len(parts)):
                target_dirs.add("/".join(parts[:depth]))

        collisions = []
        for path in untracked:
            parts = path.split("/")
            ancestors = ("/".join(parts[:depth]) for depth in range(1, len(parts)))
            if (
                path in target_files
                or path in target_dirs
                or any(ancestor in target_files for ancestor in ancestors)
            ):
                collisions.append(path)
        return sorted(collisions)

    def _rebuild_index(
        self,
        staged_changes: Mapping[str, ChangeType],
        previous_index: Mapping[str, str],
        tree_hash: str,
    ) -> Dict[str, str]:
        """Index for the new HEAD.

        Paths that were staged but not committed are carried forward first;
        every path the new commit defines then overwrites them.
        """
        index: Dict[str, str] = {}

        for path, change in staged_changes.items():
            if change is ChangeType.DELETED:
                continue
            index[path] = previous_index[path]

        index.update(self.tree_codec.flatten_tree(tree_hash))
        return index
