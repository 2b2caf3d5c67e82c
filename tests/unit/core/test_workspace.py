"""Unit tests for working-tree helpers."""

from pathlib import Path

from litvcs.core.workspace import clear_working_tree, iter_workspace_files


def _populate(root: Path) -> None:
    for rel_path in ["b.txt", "a/x.txt", "a/deep/y.txt", ".lit/HEAD", ".lit/objects/ab/cd"]:
        target = root / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(rel_path)


class TestIterWorkspaceFiles:
    """Test walking the working tree."""

    def test_sorted_posix_paths(self, tmp_path: Path) -> None:
        _populate(tmp_path)

        assert list(iter_workspace_files(tmp_path)) == [
            "a/deep/y.txt",
            "a/x.txt",
            "b.txt",
        ]

    def test_only_top_level_metadata_is_skipped(self, tmp_path: Path) -> None:
        """A nested directory that happens to be named .lit is ordinary content."""
        nested = tmp_path / "sub" / ".lit"
        nested.mkdir(parents=True)
        (nested / "f").write_text("x")

        assert list(iter_workspace_files(tmp_path)) == ["sub/.lit/f"]


class TestClearWorkingTree:
    """Test clearing tracked files."""

    def test_removes_files_and_empty_dirs(self, tmp_path: Path) -> None:
        _populate(tmp_path)

        removed = clear_working_tree(tmp_path, set())

        assert removed == 3
        assert not (tmp_path / "a").exists()
        assert not (tmp_path / "b.txt").exists()
        assert (tmp_path / ".lit" / "HEAD").exists()
        assert (tmp_path / ".lit" / "objects" / "ab" / "cd").exists()

    def test_leaves_listed_files(self, tmp_path: Path) -> None:
        _populate(tmp_path)

        clear_working_tree(tmp_path, {"a/deep/y.txt"})

        assert (tmp_path / "a" / "deep" / "y.txt").exists()
        assert not (tmp_path / "a" / "x.txt").exists()
        assert not (tmp_path / "b.txt").exists()

    def test_removes_untracked_empty_directories(self, tmp_path: Path) -> None:
        """Empty directories go too, whether or not anything was tracked in them."""
        _populate(tmp_path)
        (tmp_path / "empty" / "nested").mkdir(parents=True)

        clear_working_tree(tmp_path, set())

        assert not (tmp_path / "empty").exists()
