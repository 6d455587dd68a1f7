"""Three-way file reconciliation.

Classification works directly on the tracked-file maps of the three
commits involved (current HEAD, the other branch head and their lowest
common ancestor); only files appearing in at least one of them are
considered.
"""

from dataclasses import dataclass, field
from typing import Mapping

# Per-file outcomes
UNCHANGED = "unchanged"  # keep whatever HEAD has (including absence)
KEEP_HEAD = "keep_head"  # HEAD changed, other did not
TAKE_OTHER = "take_other"  # other changed or added, HEAD did not
REMOVE = "remove"  # other removed, HEAD left it unchanged
CONFLICT = "conflict"  # both sides changed it differently

CONFLICT_START = b"<<<<<<< HEAD\n"
CONFLICT_SEP = b"=======\n"
CONFLICT_END = b">>>>>>>\n"


def classify(head: str | None, other: str | None, base: str | None) -> str:
    """Decide what a merge does with one file.

    Args:
        head: Blob digest tracked by the current HEAD, or None.
        other: Blob digest tracked by the other branch head, or None.
        base: Blob digest tracked by the split point, or None.

    Returns:
        One of the outcome constants of this module.
    """
    if head == other:
        # Same edit, same removal, or untouched on both sides.
        return UNCHANGED
    if head == base:
        return TAKE_OTHER if other is not None else REMOVE
    if other == base:
        # HEAD modified, added or removed it; other left it alone.
        return KEEP_HEAD if head is not None else UNCHANGED
    return CONFLICT


def conflict_contents(head: bytes | None, other: bytes | None) -> bytes:
    """Build the marker block written for a conflicted file.

    A side that removed the file contributes empty contents.
    """
    return b"".join(
        [CONFLICT_START, head or b"", CONFLICT_SEP, other or b"", CONFLICT_END]
    )


@dataclass(frozen=True)
class MergePlan:
    """Per-file decisions for a three-way merge, keyed by outcome."""

    take_other: dict[str, str] = field(default_factory=dict)
    keep_head: dict[str, str] = field(default_factory=dict)
    remove: tuple[str, ...] = ()
    conflicts: tuple[str, ...] = ()

    @property
    def touched(self) -> tuple[str, ...]:
        """Files whose working copies the merge writes or deletes."""
        return tuple(sorted({*self.take_other, *self.remove, *self.conflicts}))


def plan_merge(
    head: Mapping[str, str],
    other: Mapping[str, str],
    base: Mapping[str, str],
) -> MergePlan:
    """Classify every file tracked by any of the three commits."""
    take_other: dict[str, str] = {}
    keep_head: dict[str, str] = {}
    remove: list[str] = []
    conflicts: list[str] = []

    for name in sorted({*head, *other, *base}):
        outcome = classify(head.get(name), other.get(name), base.get(name))
        if outcome == TAKE_OTHER:
            take_other[name] = other[name]
        elif outcome == KEEP_HEAD:
            keep_head[name] = head[name]
        elif outcome == REMOVE:
            remove.append(name)
        elif outcome == CONFLICT:
            conflicts.append(name)

    return MergePlan(
        take_other=take_other,
        keep_head=keep_head,
        remove=tuple(remove),
        conflicts=tuple(conflicts),
    )


@dataclass(frozen=True)
class MergeResult:
    """Result of a merge operation."""

    merged: bool
    commit: str | None
    strategy: str  # "fast_forward", "three_way"
    conflicts: tuple[str, ...] = ()
    taken_files: tuple[str, ...] = ()
    removed_files: tuple[str, ...] = ()

    @property
    def had_conflicts(self) -> bool:
        return bool(self.conflicts)

    def __bool__(self) -> bool:
        return self.merged
