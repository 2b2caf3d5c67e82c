"""Conversion between the flat staging index and hierarchical trees.

The staging index maps repository-relative POSIX paths to blob hashes. A
commit instead points at one root tree whose entries are blobs or nested
trees, one tree per directory level. Both directions use explicit work-lists,
so arbitrarily deep directory nesting never hits the recursion limit.
"""

from pathlib import Path
from typing import Dict, List, Mapping, Tuple

from loguru import logger

from litvcs.exceptions import StorageIOError
from litvcs.storage.object_store import ObjectStore
from litvcs.storage.objects import ObjectType, TreeEntry


def _depth(directory: str) -> int:
    """Nesting depth of a directory key; the root ("") has depth 0."""
    return 0 if directory == "" else directory.count("/") + 1


class TreeCodec:
    """Builds trees from flat indexes and flattens them back.

    Empty directories are not representable: a directory only exists in a
    tree when at least one indexed path lies below it. An empty index yields
    the empty root tree.

    Attributes:
        object_store: ObjectStore the trees are written to and read from
    """

    def __init__(self, object_store: ObjectStore) -> None:
        self.object_store = object_store

    def build_tree(self, flat_index: Mapping[str, str]) -> str:
        """Write the tree hierarchy for ``flat_index`` and return the root hash.

        Paths are partitioned on "/" and grouped into one node per directory.
        Nodes are written deepest first so every subtree hash is known before
        its parent is written. The result depends only on the mapping's
        content, never on insertion order.

        Args:
            flat_index: Mapping of repository-relative path to blob hash

        Returns:
            Hash of the root tree

        Raises:
            ValueError: If a path is empty or is both a file and a directory
        """
        nodes: Dict[str, Dict[str, TreeEntry]] = {"": {}}
        files_by_dir: Dict[str, Dict[str, str]] = {"": {}}

        for path, blob_hash in flat_index.items():
            parts = path.split("/")
            if any(part in ("", ".", "..") for part in parts):
                raise ValueError(f"Invalid index path: {path!r}")

            for depth in range(1, len(parts)):
                directory = "/".join(parts[:depth])
                nodes.setdefault(directory, {})
                files_by_dir.setdefault(directory, {})

            parent = "/".join(parts[:-1])
            files_by_dir[parent][parts[-1]] = blob_hash

        for directory, files in files_by_dir.items():
            for name, blob_hash in files.items():
                child = f"{directory}/{name}" if directory else name
                if child in nodes:
                    raise ValueError(f"Path is both a file and a directory: {child!r}")
                nodes[directory][name] = TreeEntry(ObjectType.BLOB, blob_hash)

        # Deepest directories first; the root is always written last
        for directory in sorted(nodes, key=_depth, reverse=True):
            if directory == "":
                continue
            tree_hash = self.object_store.write_tree(nodes[directory])
            parent, _, name = directory.rpartition("/")
            nodes[parent][name] = TreeEntry(ObjectType.TREE, tree_hash)

        root_hash = self.object_store.write_tree(nodes[""])
        logger.debug("Built tree {} from {} path(s)", root_hash[:12], len(flat_index))
        return root_hash

    def flatten_tree(self, tree_hash: str, base_path: str = "") -> Dict[str, str]:
        """Inverse of ``build_tree``: map every blob path under a tree to its hash.

        Args:
            tree_hash: Hash of the tree to flatten
            base_path: Prefix for every produced path (e.g. "sub/")

        Returns:
            Mapping of path to blob hash
        """
        result: Dict[str, str] = {}
        pending: List[Tuple[str, str]] = [(tree_hash, base_path)]

        while pending:
            current_hash, prefix = pending.pop()
            for name, entry in self.object_store.read_tree(current_hash).items():
                if entry.kind is ObjectType.TREE:
                    pending.append((entry.hash, f"{prefix}{name}/"))
                elif entry.kind is ObjectType.BLOB:
                    result[prefix + name] = entry.hash
                else:
                    raise AssertionError(f"Unexpected tree entry kind: {entry.kind}")

        return result

    def materialize(self, tree_hash: str, workspace_root: Path) -> List[str]:
        """Write every blob of a tree into the working tree.

        Args:
            tree_hash: Root tree to load
            workspace_root: Directory the tree's paths are relative to

        Returns:
            Sorted list of written paths
        """
        workspace_root = Path(workspace_root)
        flat = self.flatten_tree(tree_hash)

        for rel_path in sorted(flat):
            content = self.object_store.read_blob(flat[rel_path])
            target = workspace_root / rel_path
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content)
            except OSError as e:
                raise StorageIOError(f"Failed to write {target}: {e}") from e
            logger.debug("Created {}", rel_path)

        return sorted(flat)
