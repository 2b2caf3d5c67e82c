"""Branch references and the HEAD state machine.

HEAD is either attached to a branch or detached at a commit. Branches live in
.lit/refs/heads/<name> as ``{"Reference": <commit hash>}`` and HEAD in
.lit/HEAD as ``{"Detached": bool, "Location": str}``.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from loguru import logger

from litvcs.constants import BRANCH_NAME_PATTERN, HEAD_FILE, HEADS_DIR, REFS_DIR
from litvcs.exceptions import (
    AlreadyExistsError,
    InvalidReferenceError,
    NotFoundError,
    ObjectCorruptedError,
    StorageIOError,
)
from litvcs.storage.jsonio import read_json, write_json
from litvcs.storage.object_store import ObjectStore

_BRANCH_NAME_RE = re.compile(BRANCH_NAME_PATTERN)


def validate_branch_name(name: str) -> None:
    """Raise InvalidReferenceError unless ``name`` is a legal branch name."""
    if not _BRANCH_NAME_RE.fullmatch(name):
        raise InvalidReferenceError(f"Invalid branch name: {name!r}")


@dataclass(frozen=True)
class HeadState:
    """Where HEAD points.

    Attributes:
        detached: True if HEAD points directly at a commit
        location: Branch name when attached, commit hash when detached
    """

    detached: bool
    location: str

    @classmethod
    def attached(cls, branch: str) -> "HeadState":
        return cls(detached=False, location=branch)

    @classmethod
    def detached_at(cls, commit_hash: str) -> "HeadState":
        return cls(detached=True, location=commit_hash)

    def to_dict(self) -> dict:
        return {"Detached": self.detached, "Location": self.location}

    def describe(self) -> str:
        if self.detached:
            return f"detached at {self.location[:7]}"
        return f"branch {self.location}"


class RefManager:
    """Owns branch pointers and HEAD.

    Every transition goes through ``set_head``, which refuses targets that
    do not exist, so HEAD never references a missing branch or a non-commit.
    The one exception is the unborn default branch written by ``initialize``:
    it only comes into existence with the first commit.

    Attributes:
        lit_dir: Path to .lit directory
        heads_dir: Directory holding one file per branch
        head_path: Path to the HEAD file
        object_store: ObjectStore used to validate commit targets
    """

    def __init__(self, lit_dir: Path, object_store: ObjectStore) -> None:
        self.lit_dir = Path(lit_dir)
        self.heads_dir = self.lit_dir / REFS_DIR / HEADS_DIR
        self.head_path = self.lit_dir / HEAD_FILE
        self.object_store = object_store

    def initialize(self, default_branch: str) -> None:
        """Create the refs directory and attach HEAD to an unborn branch."""
        validate_branch_name(default_branch)
        try:
            self.heads_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"Failed to create {self.heads_dir}: {e}") from e
        self._write_head(HeadState.attached(default_branch))

    # ------------------------------------------------------------------
    # HEAD
    # ------------------------------------------------------------------

    def read_head(self) -> HeadState:
        """Read the current HEAD state.

        Raises:
            StorageIOError: If HEAD is missing or unreadable
        """
        try:
            data = read_json(self.head_path)
        except FileNotFoundError:
            raise StorageIOError(f"HEAD file missing: {self.head_path}") from None

        try:
            return HeadState(detached=bool(data["Detached"]), location=str(data["Location"]))
        except (KeyError, TypeError) as e:
            raise ObjectCorruptedError(f"Malformed HEAD: {e}") from e

    def current_branch(self) -> Optional[str]:
        """Name of the branch HEAD is attached to, or None when detached."""
        head = self.read_head()
        return None if head.detached else head.location

    def validate_head(self, state: HeadState) -> None:
        """Check that ``state`` is a legal HEAD target.

        Raises:
            InvalidReferenceError: If the branch doesn't exist (attached) or
                the location is not a commit (detached)
        """
        if state.detached:
            if not self.object_store.is_commit(state.location):
                raise InvalidReferenceError(f"{state.location} is not the hash of a commit")
        elif not self.branch_exists(state.location):
            raise InvalidReferenceError(f"Branch not found: {state.location}")

    def set_head(self, state: HeadState) -> None:
        """Validate and persist a HEAD transition."""
        self.validate_head(state)
        self._write_head(state)
        logger.info("HEAD is now at {}", state.describe())

    def head_commit(self) -> Optional[str]:
        """Resolve HEAD to a commit hash.

        Returns:
            The commit hash, or None if HEAD is attached to a branch that has
            no commit yet
        """
        head = self.read_head()
        if not head.location:
            return None
        if head.detached:
            return head.location
        if not self.branch_exists(head.location):
            return None
        return self.read_branch(head.location)

    def nudge_head(self, commit_hash: str) -> None:
        """Advance HEAD after a commit.

        When attached, the branch is moved (and created if it is still
        unborn); when detached, HEAD itself is rewritten.
        """
        head = self.read_head()

        if head.detached:
            self.set_head(HeadState.detached_at(commit_hash))
            return

        if not self.branch_exists(head.location):
            self.create_branch(head.location, commit_hash)
        else:
            self._write_branch(head.location, commit_hash)
        logger.debug("Branch {} now at {}", head.location, commit_hash[:12])

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def branch_exists(self, name: str) -> bool:
        if not _BRANCH_NAME_RE.fullmatch(name):
            return False
        return self._branch_path(name).is_file()

    def read_branch(self, name: str) -> str:
        """Return the commit hash a branch points to.

        Raises:
            NotFoundError: If the branch doesn't exist
        """
        if not self.branch_exists(name):
            raise NotFoundError(f"Branch not found: {name}")

        try:
            data = read_json(self._branch_path(name))
        except FileNotFoundError:
            raise NotFoundError(f"Branch not found: {name}") from None

        try:
            return str(data["Reference"])
        except (KeyError, TypeError) as e:
            raise ObjectCorruptedError(f"Malformed branch {name}: {e}") from e

    def list_branches(self) -> List[str]:
        """Get all branch names, sorted."""
        if not self.heads_dir.is_dir():
            return []
        return sorted(
            path.name
            for path in self.heads_dir.iterdir()
            if path.is_file() and _BRANCH_NAME_RE.fullmatch(path.name)
        )

    def create_branch(self, name: str, commit_hash: str) -> None:
        """Create a branch pointing at an existing commit.

        Raises:
            AlreadyExistsError: If the branch already exists
            InvalidReferenceError: If the name is invalid or the hash is not
                a commit
        """
        validate_branch_name(name)

        if self.branch_exists(name):
            raise AlreadyExistsError(f"Branch already exists: {name}")

        if not self.object_store.is_commit(commit_hash):
            raise InvalidReferenceError(f"{commit_hash} is not the hash of a commit")

        self._write_branch(name, commit_hash)
        logger.info("Created branch {} at {}", name, commit_hash[:8])

    def delete_branch(self, name: str) -> None:
        """Delete a branch.

        Raises:
            NotFoundError: If the branch doesn't exist
        """
        if not self.branch_exists(name):
            raise NotFoundError(f"Branch not found: {name}")

        try:
            self._branch_path(name).unlink()
        except OSError as e:
            raise StorageIOError(f"Failed to delete branch {name}: {e}") from e
        logger.info("Deleted branch {}", name)

    def delete_branch_safe(self, name: str) -> None:
        """Delete a branch, detaching HEAD first if it is attached to it."""
        head = self.read_head()

        if not head.detached and head.location == name:
            commit_hash = self.read_branch(name)
            self.set_head(HeadState.detached_at(commit_hash))

        self.delete_branch(name)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _branch_path(self, name: str) -> Path:
        return self.heads_dir / name

    def _write_branch(self, name: str, commit_hash: str) -> None:
        write_json(self._branch_path(name), {"Reference": commit_hash})

    def _write_head(self, state: HeadState) -> None:
        write_json(self.head_path, state.to_dict())
