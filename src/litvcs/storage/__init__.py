"""Storage layer for lit.

This module provides the content-addressable object store, the tree codec
that maps staging indexes to tree hierarchies, and commit creation.
"""

from litvcs.storage.commit_builder import CommitBuilder, CommitRecord
from litvcs.storage.object_store import ObjectStore, compute_hash
from litvcs.storage.objects import Commit, ObjectType, TreeEntry
from litvcs.storage.tree_codec import TreeCodec

__all__ = [
    "ObjectStore",
    "compute_hash",
    "Commit",
    "ObjectType",
    "TreeEntry",
    "TreeCodec",
    "CommitBuilder",
    "CommitRecord",
]
