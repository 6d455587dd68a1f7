"""Tests for the staging area."""

import pytest

from snapvc import Blob, NothingToRemove, ObjectStore, StagingArea
from snapvc.kv.memory import Memory
from snapvc.staging import stage_key


@pytest.fixture
def staging():
    store = Memory()
    return StagingArea(store, ObjectStore(store))


class TestStageKey:
    @pytest.mark.parametrize(
        "name, key",
        [
            ("a.txt", "a"),
            ("archive.tar.gz", "archive.tar"),
            ("Makefile", "Makefile"),
            (".hidden", ".hidden"),
        ],
    )
    def test_stage_key(self, name, key):
        assert stage_key(name) == key


class TestAddition:
    def test_stage_new_file(self, staging):
        blob = Blob("a.txt", b"one")
        assert staging.stage_for_addition(blob, {}) is True
        assert staging.additions() == {"a.txt": blob}
        assert staging.staged_digests() == {"a.txt": blob.digest}
        assert staging.is_staged_for_addition("a.txt")
        assert staging.objects.has_blob(blob.digest)
        assert not staging.is_empty()

    def test_entry_key_is_stem(self, staging):
        staging.stage_for_addition(Blob("a.txt", b"one"), {})
        assert list(staging.store.keys("objects/staged/addition/")) == [
            "objects/staged/addition/a"
        ]

    def test_restage_replaces(self, staging):
        staging.stage_for_addition(Blob("a.txt", b"one"), {})
        staging.stage_for_addition(Blob("a.txt", b"two"), {})
        assert staging.additions()["a.txt"].contents == b"two"

    def test_unchanged_file_not_staged(self, staging):
        blob = Blob("a.txt", b"one")
        assert staging.stage_for_addition(blob, {"a.txt": blob.digest}) is False
        assert staging.is_empty()

    def test_reverting_drops_pending_addition(self, staging):
        committed = Blob("a.txt", b"one")
        tracked = {"a.txt": committed.digest}
        staging.stage_for_addition(Blob("a.txt", b"two"), tracked)
        assert staging.stage_for_addition(committed, tracked) is False
        assert staging.is_empty()

    def test_add_cancels_removal(self, staging):
        blob = Blob("a.txt", b"one")
        tracked = {"a.txt": blob.digest}
        staging.stage_for_removal("a.txt", tracked)
        staging.stage_for_addition(blob, tracked)
        assert staging.removals() == []
        assert staging.is_empty()


class TestRemoval:
    def test_remove_tracked(self, staging):
        assert staging.stage_for_removal("a.txt", {"a.txt": "d"}) is True
        assert staging.removals() == ["a.txt"]
        assert staging.is_staged_for_removal("a.txt")
        assert not staging.is_staged_for_removal("a.md")

    def test_remove_staged_untracked(self, staging):
        staging.stage_for_addition(Blob("a.txt", b"one"), {})
        assert staging.stage_for_removal("a.txt", {}) is False
        assert staging.is_empty()

    def test_remove_staged_and_tracked(self, staging):
        staging.stage_for_addition(Blob("a.txt", b"two"), {"a.txt": "d"})
        assert staging.stage_for_removal("a.txt", {"a.txt": "d"}) is True
        assert staging.additions() == {}
        assert staging.removals() == ["a.txt"]

    def test_nothing_to_remove(self, staging):
        with pytest.raises(NothingToRemove):
            staging.stage_for_removal("a.txt", {})

    def test_other_extension_is_not_unstaged(self, staging):
        staging.stage_for_addition(Blob("a.txt", b"one"), {})
        with pytest.raises(NothingToRemove):
            staging.stage_for_removal("a.md", {})
        assert staging.is_staged_for_addition("a.txt")


class TestApply:
    def test_apply(self, staging):
        tracked = {"keep": "k", "change.txt": "old", "drop.txt": "x"}
        assert staging.stage_for_addition(Blob("change.txt", b"new"), tracked)
        staging.stage_for_addition(Blob("add.txt", b"add"), tracked)
        staging.stage_for_removal("drop.txt", tracked)
        assert staging.apply(tracked) == {
            "keep": "k",
            "change.txt": Blob("change.txt", b"new").digest,
            "add.txt": Blob("add.txt", b"add").digest,
        }
        # apply does not consume the stage
        assert not staging.is_empty()

    def test_clear(self, staging):
        staging.stage_for_addition(Blob("a.txt", b"one"), {})
        staging.stage_for_removal("b.txt", {"b.txt": "d"})
        staging.clear()
        assert staging.is_empty()
        assert staging.additions() == {}
        assert staging.removals() == []
