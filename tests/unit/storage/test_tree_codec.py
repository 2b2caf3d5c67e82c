"""Unit tests for TreeCodec."""

from pathlib import Path

import pytest

from litvcs.storage import ObjectStore, TreeCodec
from litvcs.storage.objects import ObjectType


@pytest.fixture
def flat_index(store: ObjectStore) -> dict:
    """A small nested index referencing real blobs."""
    return {
        "README": store.write_blob(b"readme\n"),
        "src/main.py": store.write_blob(b"print('hi')\n"),
        "src/pkg/util.py": store.write_blob(b"X = 1\n"),
        "docs/guide.md": store.write_blob(b"# Guide\n"),
    }


class TestBuildTree:
    """Test building trees from flat indexes."""

    def test_round_trip(self, codec: TreeCodec, flat_index: dict) -> None:
        """Flattening a built tree gives back the original index."""
        assert codec.flatten_tree(codec.build_tree(flat_index)) == flat_index

    def test_order_independent(self, codec: TreeCodec, flat_index: dict) -> None:
        """Equal mappings produce equal root hashes."""
        reversed_index = dict(reversed(list(flat_index.items())))
        assert codec.build_tree(flat_index) == codec.build_tree(reversed_index)

    def test_content_change_changes_root(
        self, store: ObjectStore, codec: TreeCodec, flat_index: dict
    ) -> None:
        changed = dict(flat_index)
        changed["src/pkg/util.py"] = store.write_blob(b"X = 2\n")
        assert codec.build_tree(flat_index) != codec.build_tree(changed)

    def test_one_tree_per_directory(
        self, store: ObjectStore, codec: TreeCodec, flat_index: dict
    ) -> None:
        """The root holds blobs and one subtree per top-level directory."""
        root = store.read_tree(codec.build_tree(flat_index))

        assert set(root) == {"README", "src", "docs"}
        assert root["README"].kind is ObjectType.BLOB
        assert root["src"].kind is ObjectType.TREE

        src = store.read_tree(root["src"].hash)
        assert set(src) == {"main.py", "pkg"}
        assert src["pkg"].kind is ObjectType.TREE

    def test_empty_index(self, store: ObjectStore, codec: TreeCodec) -> None:
        """An empty index yields the empty root tree."""
        root_hash = codec.build_tree({})
        assert store.read_tree(root_hash) == {}
        assert codec.flatten_tree(root_hash) == {}

    def test_deep_nesting(self, store: ObjectStore, codec: TreeCodec) -> None:
        """Deep paths do not hit the recursion limit."""
        deep_path = "/".join(f"d{i}" for i in range(1500)) + "/leaf.txt"
        index = {deep_path: store.write_blob(b"leaf")}

        assert codec.flatten_tree(codec.build_tree(index)) == index

    @pytest.mark.parametrize("bad_path", ["", "a//b", "./a", "a/../b", "a/"])
    def test_rejects_invalid_paths(
        self, store: ObjectStore, codec: TreeCodec, bad_path: str
    ) -> None:
        with pytest.raises(ValueError, match="Invalid index path"):
            codec.build_tree({bad_path: store.write_blob(b"x")})

    def test_rejects_file_directory_conflict(
        self, store: ObjectStore, codec: TreeCodec
    ) -> None:
        blob_hash = store.write_blob(b"x")
        with pytest.raises(ValueError, match="both a file and a directory"):
            codec.build_tree({"a": blob_hash, "a/b": blob_hash})


class TestFlattenTree:
    """Test flattening trees."""

    def test_base_path_prefix(self, codec: TreeCodec, flat_index: dict) -> None:
        flat = codec.flatten_tree(codec.build_tree(flat_index), base_path="root/")
        assert flat == {f"root/{path}": h for path, h in flat_index.items()}


class TestMaterialize:
    """Test writing trees to disk."""

    def test_materialize_writes_files(
        self, codec: TreeCodec, flat_index: dict, tmp_path: Path
    ) -> None:
        target = tmp_path / "out"
        target.mkdir()

        written = codec.materialize(codec.build_tree(flat_index), target)

        assert written == sorted(flat_index)
        assert (target / "src" / "pkg" / "util.py").read_bytes() == b"X = 1\n"
        assert (target / "README").read_bytes() == b"readme\n"

    def test_materialize_overwrites_existing(
        self, store: ObjectStore, codec: TreeCodec, tmp_path: Path
    ) -> None:
        (tmp_path / "a.txt").write_text("old", encoding="utf-8")
        tree_hash = codec.build_tree({"a.txt": store.write_blob(b"new")})

        codec.materialize(tree_hash, tmp_path)

        assert (tmp_path / "a.txt").read_bytes() == b"new"
