"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Callable

import pytest

from litvcs.core import Repository
from litvcs.storage import ObjectStore, TreeCodec


@pytest.fixture
def lit_dir(tmp_path: Path) -> Path:
    """Create a bare .lit directory with an objects folder."""
    lit = tmp_path / ".lit"
    (lit / "objects").mkdir(parents=True)
    return lit


@pytest.fixture
def store(lit_dir: Path) -> ObjectStore:
    """Create an ObjectStore instance."""
    return ObjectStore(lit_dir)


@pytest.fixture
def codec(store: ObjectStore) -> TreeCodec:
    """Create a TreeCodec over the test store."""
    return TreeCodec(store)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create an empty workspace directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def repo(workspace: Path) -> Repository:
    """Create a freshly initialized repository."""
    return Repository.init(workspace)


@pytest.fixture
def write_file(workspace: Path) -> Callable[[str, str], Path]:
    """Return a helper writing text to a workspace-relative path."""

    def _write(rel_path: str, content: str) -> Path:
        target = workspace / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    return _write


@pytest.fixture
def committed_repo(repo: Repository, write_file) -> Repository:
    """Repository with one commit on main containing a.txt and docs/b.txt."""
    write_file("a.txt", "alpha\n")
    write_file("docs/b.txt", "bravo\n")
    repo.stage(".")
    repo.commit("first")
    return repo
