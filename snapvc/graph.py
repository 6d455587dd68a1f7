"""Traversals over the commit graph.

The graph is implicit: every commit names up to two parents and there
is no separate adjacency structure. By default ancestry follows first
parents only, so a merge commit's second-parent lineage is reachable
only when it also lies on some first-parent chain.
"""

from collections import deque
from typing import Iterator

from .errors import NoCommonAncestor
from .object_store import ObjectStore


def history(
    objects: ObjectStore,
    start: str,
    *,
    all_parents: bool = False,
) -> Iterator[str]:
    """Yield commit digests from ``start`` towards the root.

    Args:
        objects: Store holding the commits.
        start: Starting commit digest.
        all_parents: If True, BFS over both parents (full DAG).
            If False, follow first parent only (linear).
    """
    if not all_parents:
        current: str | None = start
        while current is not None:
            yield current
            current = objects.get_commit(current).parent
        return

    visited: set[str] = set()
    queue: deque[str] = deque([start])
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        yield current
        for p in objects.get_commit(current).parents:
            if p not in visited:
                queue.append(p)


def ancestor_set(
    objects: ObjectStore, start: str, *, all_parents: bool = False
) -> set[str]:
    """Every digest visited walking from ``start`` to the root, inclusive."""
    return set(history(objects, start, all_parents=all_parents))


def find_lca(
    objects: ObjectStore,
    head: str,
    other: str,
    *,
    all_parents: bool = False,
) -> str:
    """Find the lowest common ancestor of two commits.

    Collects the ancestors of ``other``, then walks from ``head`` and
    returns the first commit found in that set.

    Raises:
        NoCommonAncestor: The two histories never meet.
    """
    if head == other:
        return head
    others = ancestor_set(objects, other, all_parents=all_parents)
    for digest in history(objects, head, all_parents=all_parents):
        if digest in others:
            return digest
    raise NoCommonAncestor()
