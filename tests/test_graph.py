"""Tests for history walks and the lowest common ancestor."""

import pytest

from snapvc import Commit, NoCommonAncestor, ObjectStore
from snapvc.graph import ancestor_set, find_lca, history
from snapvc.kv.memory import Memory
from snapvc.objects import initial_commit


@pytest.fixture
def graph():
    """A history with one merge commit.

    root - a - m1 - merge
                \\    /
                 b1 - b2
    """
    objects = ObjectStore(Memory())
    ids = {}
    ids["root"] = objects.put(initial_commit())
    ids["a"] = objects.put(Commit("a", 1, parent=ids["root"]))
    ids["m1"] = objects.put(Commit("m1", 2, parent=ids["a"]))
    ids["b1"] = objects.put(Commit("b1", 3, parent=ids["a"]))
    ids["merge"] = objects.put(
        Commit("merge", 4, parent=ids["m1"], other_parent=ids["b1"])
    )
    ids["b2"] = objects.put(Commit("b2", 5, parent=ids["b1"]))
    return objects, ids


class TestHistory:
    def test_first_parent_chain(self, graph):
        objects, ids = graph
        walk = list(history(objects, ids["merge"]))
        assert walk == [ids["merge"], ids["m1"], ids["a"], ids["root"]]

    def test_all_parents(self, graph):
        objects, ids = graph
        walk = list(history(objects, ids["merge"], all_parents=True))
        assert walk[0] == ids["merge"]
        assert set(walk) == {
            ids["merge"], ids["m1"], ids["b1"], ids["a"], ids["root"]
        }
        assert len(walk) == len(set(walk))

    def test_root_only(self, graph):
        objects, ids = graph
        assert list(history(objects, ids["root"])) == [ids["root"]]

    def test_ancestor_set(self, graph):
        objects, ids = graph
        assert ancestor_set(objects, ids["b2"]) == {
            ids["b2"], ids["b1"], ids["a"], ids["root"]
        }


class TestFindLca:
    def test_same_commit(self, graph):
        objects, ids = graph
        assert find_lca(objects, ids["a"], ids["a"]) == ids["a"]

    def test_fork_point(self, graph):
        objects, ids = graph
        assert find_lca(objects, ids["m1"], ids["b2"]) == ids["a"]

    def test_ancestor(self, graph):
        objects, ids = graph
        assert find_lca(objects, ids["b2"], ids["a"]) == ids["a"]
        assert find_lca(objects, ids["a"], ids["b2"]) == ids["a"]

    def test_first_parent_ignores_merged_branch(self, graph):
        objects, ids = graph
        assert find_lca(objects, ids["merge"], ids["b2"]) == ids["a"]

    def test_all_parents_sees_merged_branch(self, graph):
        objects, ids = graph
        lca = find_lca(objects, ids["merge"], ids["b2"], all_parents=True)
        assert lca == ids["b1"]

    def test_unrelated_roots(self):
        objects = ObjectStore(Memory())
        x = objects.put(Commit("x", 1))
        y = objects.put(Commit("y", 2))
        with pytest.raises(NoCommonAncestor):
            find_lca(objects, x, y)


class TestDiamond:
    def test_diamond(self):
        """root -> a, b; a, b -> c (merge)."""
        objects = ObjectStore(Memory())
        root = objects.put(initial_commit())
        a = objects.put(Commit("a", 1, parent=root))
        b = objects.put(Commit("b", 2, parent=root))
        c = objects.put(Commit("c", 3, parent=a, other_parent=b))
        assert find_lca(objects, a, b) == root
        # b is reachable from c only through its second parent.
        assert find_lca(objects, c, b) == root
        assert find_lca(objects, c, b, all_parents=True) == b
