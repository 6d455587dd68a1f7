"""Tests for the Files KV store."""

import pytest

from snapvc.kv.files import Files


@pytest.fixture
def files_store(tmp_path):
    return Files(tmp_path), tmp_path


class TestFilesBasic:
    def test_set_get(self, files_store):
        store, _ = files_store
        store.set("k", b"v")
        assert store.get("k") == b"v"

    def test_get_missing(self, files_store):
        store, _ = files_store
        assert store.get("nope") is None
        assert store.get("objects/commits/nope") is None

    def test_nested_key_maps_to_path(self, files_store):
        store, root = files_store
        store.set("objects/commits/abc", b"data")
        assert (root / "objects" / "commits" / "abc").read_bytes() == b"data"

    def test_contains(self, files_store):
        store, _ = files_store
        store.set("refs/heads/master", b"v")
        assert "refs/heads/master" in store
        assert "refs/heads/dev" not in store

    def test_keys_with_prefix(self, files_store):
        store, _ = files_store
        store.set_many(
            {
                "refs/heads/master": b"1",
                "refs/heads/origin/master": b"2",
                "objects/blobs/aa": b"3",
                "HEAD": b"4",
            }
        )
        assert list(store.keys("refs/heads/")) == [
            "refs/heads/master",
            "refs/heads/origin/master",
        ]
        assert set(store.keys()) == {
            "refs/heads/master",
            "refs/heads/origin/master",
            "objects/blobs/aa",
            "HEAD",
        }

    def test_keys_missing_directory(self, files_store):
        store, _ = files_store
        assert list(store.keys("objects/staged/addition/")) == []

    def test_overwrite_leaves_no_temp_file(self, files_store):
        store, root = files_store
        store.set("HEAD", b"old")
        store.set("HEAD", b"new")
        assert store.get("HEAD") == b"new"
        assert sorted(p.name for p in root.iterdir()) == ["HEAD", "tmp"]
        assert list((root / "tmp").iterdir()) == []

    def test_keys_ending_in_tmp_are_listed(self, files_store):
        store, _ = files_store
        store.set("objects/staged/addition/notes.tmp", b"1")
        store.set("refs/heads/wip.tmp", b"2")
        assert list(store.keys("objects/staged/addition/")) == [
            "objects/staged/addition/notes.tmp"
        ]
        assert list(store.keys("refs/heads/")) == ["refs/heads/wip.tmp"]

    def test_temp_directory_is_not_a_key(self, files_store):
        store, _ = files_store
        store.set("HEAD", b"1")
        assert list(store.keys()) == ["HEAD"]
        with pytest.raises(ValueError, match="reserved"):
            store.set("tmp/x", b"v")

    @pytest.mark.parametrize("key", ["", "/abs", "a/../b", "a//b", "."])
    def test_rejects_unsafe_keys(self, files_store, key):
        store, _ = files_store
        with pytest.raises(ValueError, match="Invalid key"):
            store.set(key, b"v")


class TestFilesRemove:
    def test_remove(self, files_store):
        store, _ = files_store
        store.set("objects/staged/addition/a", b"v")
        store.remove("objects/staged/addition/a")
        assert store.get("objects/staged/addition/a") is None

    def test_remove_missing(self, files_store):
        store, _ = files_store
        store.remove("nope")

    def test_remove_many(self, files_store):
        store, _ = files_store
        store.set_many({"a": b"1", "b/c": b"2", "d": b"3"})
        store.remove_many("a", "b/c")
        assert list(store.keys()) == ["d"]
