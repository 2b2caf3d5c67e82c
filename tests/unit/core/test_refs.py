"""Unit tests for RefManager and HeadState."""

import json

import pytest

from litvcs.core import HeadState, Repository
from litvcs.exceptions import (
    AlreadyExistsError,
    InvalidReferenceError,
    NotFoundError,
    ObjectCorruptedError,
)


class TestHeadState:
    """Test the HEAD value type."""

    def test_attached(self) -> None:
        head = HeadState.attached("main")
        assert not head.detached
        assert head.to_dict() == {"Detached": False, "Location": "main"}
        assert head.describe() == "branch main"

    def test_detached(self) -> None:
        head = HeadState.detached_at("a" * 64)
        assert head.detached
        assert head.describe() == "detached at aaaaaaa"


class TestInitialHead:
    """Test HEAD right after init."""

    def test_attached_to_unborn_main(self, repo: Repository) -> None:
        assert repo.head() == HeadState.attached("main")
        assert repo.current_branch() == "main"
        assert repo.head_commit() is None
        assert repo.branches() == []

    def test_head_file_format(self, repo: Repository) -> None:
        data = json.loads(repo.refs.head_path.read_text(encoding="utf-8"))
        assert data == {"Detached": False, "Location": "main"}

    def test_malformed_head(self, repo: Repository) -> None:
        repo.refs.head_path.write_text('{"Location": "main"}', encoding="utf-8")
        with pytest.raises(ObjectCorruptedError):
            repo.refs.read_head()


class TestSetHead:
    """Test HEAD transitions."""

    def test_attach_to_existing_branch(self, committed_repo: Repository) -> None:
        head_hash = committed_repo.head_commit()
        committed_repo.create_branch("feature")

        committed_repo.refs.set_head(HeadState.attached("feature"))

        assert committed_repo.current_branch() == "feature"
        assert committed_repo.head_commit() == head_hash

    def test_detach_at_commit(self, committed_repo: Repository) -> None:
        head_hash = committed_repo.head_commit()

        committed_repo.refs.set_head(HeadState.detached_at(head_hash))

        assert committed_repo.current_branch() is None
        assert committed_repo.head_commit() == head_hash

    def test_refuse_missing_branch(self, committed_repo: Repository) -> None:
        before = committed_repo.head()
        with pytest.raises(InvalidReferenceError, match="Branch not found"):
            committed_repo.refs.set_head(HeadState.attached("nope"))
        assert committed_repo.head() == before

    def test_refuse_non_commit(self, committed_repo: Repository) -> None:
        blob_hash = committed_repo.object_store.write_blob(b"blob")
        with pytest.raises(InvalidReferenceError, match="not the hash of a commit"):
            committed_repo.refs.set_head(HeadState.detached_at(blob_hash))


class TestNudgeHead:
    """Test advancing HEAD after a commit."""

    def test_attached_moves_branch(self, committed_repo: Repository, write_file) -> None:
        write_file("a.txt", "changed")
        committed_repo.stage("a.txt")
        new_hash = committed_repo.commit("second")

        assert committed_repo.refs.read_branch("main") == new_hash
        assert committed_repo.head() == HeadState.attached("main")

    def test_detached_rewrites_head(self, committed_repo: Repository, write_file) -> None:
        first = committed_repo.head_commit()
        committed_repo.refs.set_head(HeadState.detached_at(first))
        write_file("a.txt", "changed")
        committed_repo.stage("a.txt")

        new_hash = committed_repo.commit("detached work")

        assert committed_repo.head() == HeadState.detached_at(new_hash)
        assert committed_repo.refs.read_branch("main") == first


class TestBranches:
    """Test branch creation and deletion."""

    def test_create_branch(self, committed_repo: Repository) -> None:
        head_hash = committed_repo.head_commit()

        assert committed_repo.create_branch("feature") == head_hash

        assert committed_repo.refs.read_branch("feature") == head_hash
        assert committed_repo.branches() == ["feature", "main"]
        # HEAD stays where it was
        assert committed_repo.current_branch() == "main"

    def test_branch_file_format(self, committed_repo: Repository) -> None:
        committed_repo.create_branch("feature")
        path = committed_repo.refs.heads_dir / "feature"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {"Reference": committed_repo.head_commit()}

    def test_create_branch_at_prefix(self, committed_repo: Repository) -> None:
        head_hash = committed_repo.head_commit()
        assert committed_repo.create_branch("old", at=head_hash[:8]) == head_hash

    def test_create_duplicate(self, committed_repo: Repository) -> None:
        with pytest.raises(AlreadyExistsError):
            committed_repo.create_branch("main")

    def test_create_before_first_commit(self, repo: Repository) -> None:
        with pytest.raises(InvalidReferenceError, match="HEAD does not point"):
            repo.create_branch("feature")

    @pytest.mark.parametrize("name", ["", "-x", "a/b", "..", "has space", "main\n"])
    def test_invalid_names(self, committed_repo: Repository, name: str) -> None:
        with pytest.raises(InvalidReferenceError, match="Invalid branch name"):
            committed_repo.refs.create_branch(name, committed_repo.head_commit())

    def test_create_at_non_commit(self, committed_repo: Repository) -> None:
        blob_hash = committed_repo.object_store.write_blob(b"x")
        with pytest.raises(InvalidReferenceError):
            committed_repo.refs.create_branch("bad", blob_hash)

    def test_delete_branch(self, committed_repo: Repository) -> None:
        committed_repo.create_branch("feature")
        committed_repo.refs.delete_branch("feature")
        assert committed_repo.branches() == ["main"]

    def test_delete_missing_branch(self, committed_repo: Repository) -> None:
        with pytest.raises(NotFoundError):
            committed_repo.refs.delete_branch("ghost")

    def test_delete_safe_detaches_current(self, committed_repo: Repository) -> None:
        """Deleting the current branch first detaches HEAD at its commit."""
        head_hash = committed_repo.head_commit()

        committed_repo.delete_branch("main")

        assert committed_repo.head() == HeadState.detached_at(head_hash)
        assert committed_repo.head_commit() == head_hash
        assert committed_repo.branches() == []

    def test_delete_safe_other_branch(self, committed_repo: Repository) -> None:
        committed_repo.create_branch("feature")

        committed_repo.delete_branch("feature")

        assert committed_repo.head() == HeadState.attached("main")
