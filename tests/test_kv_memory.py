"""Tests for the Memory KV store."""

import pytest

from snapvc.kv.memory import Memory


class TestMemoryBasic:
    def test_set_get(self):
        m = Memory()
        m.set("k", b"v")
        assert m.get("k") == b"v"

    def test_get_missing(self):
        m = Memory()
        assert m.get("nope") is None

    def test_contains(self):
        m = Memory()
        m.set("k", b"v")
        assert "k" in m
        assert "nope" not in m

    def test_keys(self):
        m = Memory()
        m.set("a", b"1")
        m.set("b", b"2")
        assert set(m.keys()) == {"a", "b"}

    def test_keys_with_prefix(self):
        m = Memory()
        m.set("refs/heads/master", b"1")
        m.set("refs/heads/origin/master", b"2")
        m.set("HEAD", b"3")
        assert set(m.keys("refs/heads/")) == {
            "refs/heads/master",
            "refs/heads/origin/master",
        }

    def test_set_many(self):
        m = Memory()
        m.set_many({"a": b"1", "b": b"2", "c": b"3"})
        assert m.get("a") == b"1"
        assert m.get("c") == b"3"
        assert sorted(m.keys()) == ["a", "b", "c"]

    def test_overwrite(self):
        m = Memory()
        m.set("k", b"old")
        m.set("k", b"new")
        assert m.get("k") == b"new"

    def test_type_error_on_non_bytes(self):
        m = Memory()
        with pytest.raises(TypeError, match="Expected bytes"):
            m.set("k", "not bytes")  # type: ignore


class TestMemoryRemove:
    def test_remove(self):
        m = Memory()
        m.set("k", b"v")
        m.remove("k")
        assert m.get("k") is None

    def test_remove_missing(self):
        m = Memory()
        m.remove("nope")  # should not raise

    def test_remove_many(self):
        m = Memory()
        m.set_many({"a": b"1", "b": b"2", "c": b"3"})
        m.remove_many("a", "c", "missing")
        assert m.get("a") is None
        assert m.get("b") == b"2"
        assert m.get("c") is None
