"""Repository handle wiring the storage and core components together."""

import shutil
from pathlib import Path
from typing import Dict, List, Optional, Union

from loguru import logger

from litvcs.constants import DEFAULT_BRANCH, LIT_DIR, OBJECTS_DIR
from litvcs.core.checkout import CheckoutCoordinator
from litvcs.core.refs import HeadState, RefManager, validate_branch_name
from litvcs.core.staging import StagingManager
from litvcs.core.status import DiffEngine, StatusReport
from litvcs.exceptions import (
    AlreadyExistsError,
    InvalidReferenceError,
    LitError,
    NotARepositoryError,
    NothingToCommitError,
    StorageIOError,
)
from litvcs.storage.commit_builder import CommitBuilder, CommitRecord
from litvcs.storage.object_store import ObjectStore
from litvcs.storage.tree_codec import TreeCodec

PathLike = Union[str, Path]


class Repository:
    """A lit repository rooted at a workspace directory.

    All state lives under ``<root>/.lit``; every component receives that
    location explicitly, so several repositories can be used side by side
    in one process.

    Attributes:
        workspace_root: Root directory of the working tree
        lit_dir: Path to the .lit metadata directory

    Example:
        >>> repo = Repository.init(Path("project"))
        >>> repo.stage("a.txt")
        >>> repo.commit("first")
    """

    def __init__(self, workspace_root: PathLike) -> None:
        """Open an existing repository.

        Raises:
            NotARepositoryError: If ``workspace_root`` has no .lit directory
        """
        self.workspace_root = Path(workspace_root).resolve()
        self.lit_dir = self.workspace_root / LIT_DIR

        if not self.lit_dir.is_dir():
            raise NotARepositoryError(
                f"Not a lit repository (no {LIT_DIR}/ found in {self.workspace_root})"
            )

        self.object_store = ObjectStore(self.lit_dir)
        self.tree_codec = TreeCodec(self.object_store)
        self.refs = RefManager(self.lit_dir, self.object_store)
        self.diff_engine = DiffEngine(
            self.workspace_root, self.object_store, self.refs, self.tree_codec
        )
        self.staging = StagingManager(self.workspace_root, self.object_store, self.diff_engine)
        self.commits = CommitBuilder(self.object_store, self.tree_codec, self.refs)
        self.checkout_coordinator = CheckoutCoordinator(
            self.workspace_root,
            self.object_store,
            self.tree_codec,
            self.refs,
            self.diff_engine,
            self.staging,
        )

    @classmethod
    def init(cls, workspace_root: PathLike, default_branch: str = DEFAULT_BRANCH) -> "Repository":
        """Create a new repository.

        Lays out .lit/objects, .lit/refs/heads, a HEAD attached to the
        (still unborn) default branch and an empty index. If any step fails
        the partly created .lit directory is removed again.

        Raises:
            AlreadyExistsError: If the directory is already a repository
            InvalidReferenceError: If ``default_branch`` is not a legal name
            StorageIOError: If the layout cannot be created
        """
        root = Path(workspace_root).resolve()
        lit_dir = root / LIT_DIR

        if lit_dir.exists():
            raise AlreadyExistsError(f"Already a lit repository: {root}")

        validate_branch_name(default_branch)

        try:
            (lit_dir / OBJECTS_DIR).mkdir(parents=True)
        except OSError as e:
            raise StorageIOError(f"Failed to create {lit_dir}: {e}") from e

        try:
            repo = cls(root)
            repo.refs.initialize(default_branch)
            repo.staging.clear()
        except LitError:
            shutil.rmtree(lit_dir, ignore_errors=True)
            raise

        logger.info("Initialized empty lit repository in {}", lit_dir)
        return repo

    @classmethod
    def discover(cls, start: Optional[PathLike] = None) -> "Repository":
        """Open the repository containing ``start`` (default: cwd).

        Raises:
            NotARepositoryError: If no parent directory holds a .lit directory
        """
        current = Path(start or Path.cwd()).resolve()

        for candidate in (current, *current.parents):
            if (candidate / LIT_DIR).is_dir():
                return cls(candidate)

        raise NotARepositoryError(f"Not a lit repository (or any parent): {current}")

    # ------------------------------------------------------------------
    # Staging and committing
    # ------------------------------------------------------------------

    def stage(self, path: PathLike) -> Dict[str, List[str]]:
        """Stage changed and untracked files at or below ``path``."""
        return self.staging.stage(path)

    def commit(self, message: str, allow_empty: bool = False) -> str:
        """Commit the staging index.

        Args:
            message: Commit message
            allow_empty: Commit even if nothing changed since HEAD

        Returns:
            The new commit hash

        Raises:
            NothingToCommitError: If nothing is staged and ``allow_empty`` is
                False
        """
        index = self.staging.get_staged_files()

        if not allow_empty and not self.diff_engine.staged_changes(index):
            raise NothingToCommitError("Nothing to commit (no staged changes)")

        return self.commits.create_commit(index, message)

    def status(self) -> StatusReport:
        """Drift between the working tree, the index and HEAD."""
        return self.diff_engine.get_status(self.staging.get_staged_files())

    def log(self, limit: Optional[int] = None) -> List[CommitRecord]:
        """Commits reachable from HEAD, newest first."""
        return self.commits.get_commit_history(limit=limit)

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def head(self) -> HeadState:
        return self.refs.read_head()

    def head_commit(self) -> Optional[str]:
        return self.refs.head_commit()

    def current_branch(self) -> Optional[str]:
        return self.refs.current_branch()

    def branches(self) -> List[str]:
        return self.refs.list_branches()

    def create_branch(self, name: str, at: Optional[str] = None) -> str:
        """Create a branch at ``at`` (default: the HEAD commit).

        ``at`` may be an abbreviated commit hash.

        Returns:
            The commit hash the branch points to

        Raises:
            InvalidReferenceError: If HEAD has no commit yet or ``at`` names
                no commit
        """
        if at is not None:
            commit_hash = self.object_store.expand_hash(at)
            if commit_hash is None:
                raise InvalidReferenceError(f"{at} is not the hash of a commit")
        else:
            commit_hash = self.refs.head_commit()
            if commit_hash is None:
                raise InvalidReferenceError(
                    "Cannot create branch: HEAD does not point to a commit yet"
                )

        self.refs.create_branch(name, commit_hash)
        return commit_hash

    def delete_branch(self, name: str) -> None:
        """Delete a branch, detaching HEAD first if it is on that branch."""
        self.refs.delete_branch_safe(name)

    def checkout(self, location: str, detach: bool = False) -> HeadState:
        """Switch to a branch or commit; see ``CheckoutCoordinator``."""
        return self.checkout_coordinator.checkout(location, detach=detach)
