"""Content-addressable object storage for lit.

This module implements a Git-like object store using SHA-256 hashing for
content addressing. Blobs, trees and commits are stored in .lit/objects/ as
tagged JSON envelopes with automatic deduplication.
"""

import base64
import binascii
import hashlib
import string
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from litvcs.constants import (
    HASH_ALGORITHM,
    HASH_LENGTH,
    OBJECT_KEY,
    OBJECTS_DIR,
    SHARD_CHARACTERS,
    TYPE_KEY,
)
from litvcs.exceptions import (
    AmbiguousPrefixError,
    LitError,
    ObjectCorruptedError,
    ObjectNotFoundError,
    WrongTypeError,
)
from litvcs.storage.jsonio import read_json, write_json
from litvcs.storage.objects import (
    Commit,
    ObjectType,
    TreeEntry,
    canonical_commit_bytes,
    canonical_tree_bytes,
    entries_from_dict,
    entries_to_dict,
)

_HEX_DIGITS = frozenset(string.hexdigits.lower())


def compute_hash(content: bytes) -> str:
    """Compute the SHA-256 hex digest of ``content``."""
    hasher = hashlib.new(HASH_ALGORITHM)
    hasher.update(content)
    return hasher.hexdigest()


class ObjectStore:
    """Content-addressable storage for blobs, trees and commits.

    Every object is written once under the hash of its canonical bytes and
    never modified afterwards.

    Storage layout:
        .lit/objects/<hash[:2]>/<hash[2:]>

    Each file holds an envelope ``{"Type": "Blob"|"Tree"|"Commit",
    "Object": {...}}``. Blob content is base64 encoded so arbitrary bytes
    survive the JSON round trip.

    Attributes:
        objects_dir: Path to the objects directory

    Example:
        >>> store = ObjectStore(Path(".lit"))
        >>> blob_hash = store.write_blob(b"hello")
        >>> assert store.read_blob(blob_hash) == b"hello"
    """

    def __init__(self, lit_dir: Path) -> None:
        """Initialize the object store.

        Args:
            lit_dir: Path to .lit directory

        Raises:
            ValueError: If lit_dir doesn't exist
        """
        self.lit_dir = Path(lit_dir)
        self.objects_dir = self.lit_dir / OBJECTS_DIR

        if not self.lit_dir.exists():
            raise ValueError(f"lit directory not found: {lit_dir}")

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def write_blob(self, content: bytes) -> str:
        """Write file content as a blob.

        Args:
            content: Binary content to store

        Returns:
            SHA-256 hash of the content (64 hex characters)

        Raises:
            StorageIOError: If the write fails

        Example:
            >>> hash1 = store.write_blob(b"data")
            >>> hash2 = store.write_blob(b"data")
            >>> assert hash1 == hash2  # Deduplication
        """
        blob_hash = compute_hash(content)
        payload = {"Content": base64.b64encode(content).decode("ascii")}
        self._write_object(blob_hash, ObjectType.BLOB, payload)
        return blob_hash

    def write_tree(self, entries: Mapping[str, TreeEntry]) -> str:
        """Write a tree mapping entry names to blobs or subtrees.

        Returns:
            Hash of the tree's canonical serialization
        """
        tree_hash = compute_hash(canonical_tree_bytes(entries))
        self._write_object(tree_hash, ObjectType.TREE, {"Entries": entries_to_dict(entries)})
        return tree_hash

    def write_commit(self, commit: Commit) -> str:
        """Write a commit.

        Returns:
            Hash of the commit's canonical serialization
        """
        commit_hash = compute_hash(canonical_commit_bytes(commit))
        self._write_object(commit_hash, ObjectType.COMMIT, commit.to_dict())
        return commit_hash

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_blob(self, blob_hash: str) -> bytes:
        """Read blob content.

        Raises:
            ObjectNotFoundError: If the object doesn't exist
            WrongTypeError: If the object is not a blob
            ObjectCorruptedError: If the content does not match its hash
            ValueError: If blob_hash is invalid format
        """
        payload = self._read_object(blob_hash, ObjectType.BLOB)
        try:
            content = base64.b64decode(payload["Content"], validate=True)
        except (KeyError, TypeError, binascii.Error) as e:
            raise ObjectCorruptedError(f"Malformed blob {blob_hash}: {e}") from e

        actual_hash = compute_hash(content)
        if actual_hash != blob_hash:
            raise ObjectCorruptedError(
                f"Blob corrupted: expected {blob_hash}, got {actual_hash}"
            )
        return content

    def read_tree(self, tree_hash: str) -> Dict[str, TreeEntry]:
        """Read a tree as a mapping of entry name to ``TreeEntry``."""
        payload = self._read_object(tree_hash, ObjectType.TREE)
        try:
            return entries_from_dict(payload["Entries"])
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ObjectCorruptedError(f"Malformed tree {tree_hash}: {e}") from e

    def read_commit(self, commit_hash: str) -> Commit:
        """Read a commit record."""
        payload = self._read_object(commit_hash, ObjectType.COMMIT)
        try:
            return Commit.from_dict(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise ObjectCorruptedError(f"Malformed commit {commit_hash}: {e}") from e

    def object_exists(self, object_hash: str) -> bool:
        """Check whether an object of any type is stored under ``object_hash``."""
        try:
            self._validate_hash(object_hash)
        except ValueError:
            return False
        return self._get_object_path(object_hash).is_file()

    def is_commit(self, object_hash: str) -> bool:
        """Return True iff ``object_hash`` names a readable commit."""
        try:
            self.read_commit(object_hash)
        except (LitError, ValueError):
            return False
        return True

    def expand_hash(self, prefix: str) -> Optional[str]:
        """Resolve an abbreviated hash to the unique commit it names.

        The search is case-insensitive and only considers commit objects.

        Args:
            prefix: Leading hex characters of a commit hash

        Returns:
            The full commit hash, or None if no commit matches

        Raises:
            AmbiguousPrefixError: If more than one commit matches
        """
        prefix = prefix.strip().lower()
        if not prefix or len(prefix) > HASH_LENGTH or not set(prefix) <= _HEX_DIGITS:
            return None

        matches = [
            candidate
            for candidate in self._iter_hashes_with_prefix(prefix)
            if self.is_commit(candidate)
        ]

        if not matches:
            return None
        if len(matches) > 1:
            raise AmbiguousPrefixError(prefix, matches)
        return matches[0]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _write_object(
        self,
        object_hash: str,
        object_type: ObjectType,
        payload: Dict[str, Any],
    ) -> None:
        """Persist an envelope unless an object with this hash already exists."""
        object_path = self._get_object_path(object_hash)

        # Check if object already exists (deduplication)
        if object_path.is_file():
            return

        envelope = {TYPE_KEY: object_type.value, OBJECT_KEY: payload}
        write_json(object_path, envelope)
        logger.debug("Wrote {} {}", object_type.value.lower(), object_hash[:12])

    def _read_object(self, object_hash: str, expected: ObjectType) -> Dict[str, Any]:
        """Load an envelope and check its type tag."""
        self._validate_hash(object_hash)
        object_path = self._get_object_path(object_hash)

        try:
            envelope = read_json(object_path)
        except FileNotFoundError:
            raise ObjectNotFoundError(f"Object not found: {object_hash}") from None

        if not isinstance(envelope, dict) or not isinstance(envelope.get(OBJECT_KEY), dict):
            raise ObjectCorruptedError(f"Malformed object envelope: {object_hash}")

        actual = envelope.get(TYPE_KEY)
        if actual != expected.value:
            raise WrongTypeError(
                f"Object {object_hash} is a {actual}, not a {expected.value}"
            )
        return envelope[OBJECT_KEY]

    def _iter_hashes_with_prefix(self, prefix: str) -> List[str]:
        """List stored object hashes beginning with ``prefix``, sorted."""
        if not self.objects_dir.is_dir():
            return []

        head = prefix[:SHARD_CHARACTERS]
        tail = prefix[SHARD_CHARACTERS:]

        hashes = []
        for shard_dir in self.objects_dir.iterdir():
            if not shard_dir.is_dir() or not shard_dir.name.startswith(head):
                continue
            for object_file in shard_dir.iterdir():
                name = object_file.name
                # Skip in-flight temp files
                if name.startswith(".") or not name.startswith(tail):
                    continue
                hashes.append(shard_dir.name + name)
        return sorted(hashes)

    def _get_object_path(self, object_hash: str) -> Path:
        """Get the filesystem path for an object.

        Uses Git-like sharding: objects/<hash[:2]>/<hash[2:]>

        Example:
            >>> path = store._get_object_path("abc123...")
            >>> # .lit/objects/ab/c123...
        """
        prefix = object_hash[:SHARD_CHARACTERS]
        suffix = object_hash[SHARD_CHARACTERS:]
        return self.objects_dir / prefix / suffix

    def _validate_hash(self, object_hash: str) -> None:
        """Validate that a hash string is properly formatted.

        Raises:
            ValueError: If hash is invalid format
        """
        if not isinstance(object_hash, str):
            raise ValueError(f"Hash must be string, got {type(object_hash)}")

        if len(object_hash) != HASH_LENGTH:
            raise ValueError(
                f"Hash must be {HASH_LENGTH} characters, got {len(object_hash)}"
            )

        if not set(object_hash) <= _HEX_DIGITS:
            raise ValueError(f"Hash must be lowercase hexadecimal: {object_hash}")
