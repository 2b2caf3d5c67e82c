"""Exception hierarchy for lit.

Every recoverable failure raised by the library derives from ``LitError`` so
callers (the CLI in particular) can report it uniformly. Violated internal
invariants are signalled with ``AssertionError`` instead.
"""

from typing import List, Optional


class LitError(Exception):
    """Base exception for lit errors."""


class NotFoundError(LitError):
    """Raised when a branch, ref or checkout target does not exist."""


class ObjectNotFoundError(NotFoundError):
    """Raised when an object is missing from the object store."""


class NotARepositoryError(NotFoundError):
    """Raised when no .lit directory can be found."""


class WrongTypeError(LitError):
    """Raised when an object exists but carries a different type tag."""


class StorageIOError(LitError):
    """Raised when the underlying storage cannot be read or written."""


class ObjectCorruptedError(StorageIOError):
    """Raised when a stored object cannot be decoded or fails verification."""


class AlreadyExistsError(LitError):
    """Raised when a branch or repository already exists."""


class InvalidReferenceError(LitError):
    """Raised when a HEAD or branch target fails validation."""


class UncommittedChangesError(LitError):
    """Raised when checkout is refused because of staged or unstaged drift."""

    def __init__(self, message: str, report: Optional[object] = None) -> None:
        super().__init__(message)
        self.report = report


class AmbiguousPrefixError(LitError):
    """Raised when an abbreviated hash matches more than one commit."""

    def __init__(self, prefix: str, candidates: List[str]) -> None:
        self.prefix = prefix
        self.candidates = candidates
        shown = ", ".join(candidate[:12] for candidate in candidates)
        super().__init__(f"Ambiguous hash prefix '{prefix}': matches {shown}")


class NothingToStageError(LitError):
    """Raised when a staging request matches no changed or untracked file."""


class NothingToCommitError(LitError):
    """Raised when a commit is requested with no staged changes."""


class PathOutsideRepositoryError(LitError):
    """Raised when a path resolves outside the workspace root."""


class UntrackedFilesError(LitError):
    """Raised when checkout would overwrite untracked working-tree files."""

    def __init__(self, message: str, paths: List[str]) -> None:
        super().__init__(message)
        self.paths = paths
