"""Staging area: the pending delta for the next commit."""

import json
from typing import Mapping

from .errors import CorruptObject, NothingToRemove
from .kv.base import KVStore
from .log import get_logger
from .object_store import ObjectStore
from .objects import Blob

ADDITION = "objects/staged/addition/%s"
REMOVAL = "objects/staged/removal/%s"

logger = get_logger(__name__)


def stage_key(name: str) -> str:
    """On-disk key of a stage entry: the file name without its extension."""
    stem, dot, _ = name.rpartition(".")
    return stem if dot and stem else name


def _load_entry(raw: bytes) -> dict:
    try:
        entry = json.loads(raw)
    except ValueError as e:
        raise CorruptObject(f"Invalid stage entry: {e}") from e
    if not isinstance(entry, dict) or "name" not in entry:
        raise CorruptObject("Invalid stage entry")
    return entry


class StagingArea:
    """Two-sided overlay of pending additions and removals.

    Additions map a file name to a Blob whose contents are already in
    the object store; removals are bare names. A name is never staged
    on both sides at once. Both sides are persisted immediately, so the
    area survives between invocations until the next commit, checkout
    or reset clears it.
    """

    def __init__(self, store: KVStore, objects: ObjectStore) -> None:
        self.store = store
        self.objects = objects

    # -- Read operations --

    def additions(self) -> dict[str, Blob]:
        """Pending additions keyed by file name."""
        result: dict[str, Blob] = {}
        for key in self.store.keys(ADDITION % ""):
            raw = self.store.get(key)
            if raw is None:
                continue
            entry = _load_entry(raw)
            blob = self.objects.get_blob(entry["blob"])
            result[entry["name"]] = Blob(name=entry["name"], contents=blob.contents)
        return result

    def removals(self) -> list[str]:
        """Pending removals, sorted by name."""
        names = []
        for key in self.store.keys(REMOVAL % ""):
            raw = self.store.get(key)
            if raw is not None:
                names.append(_load_entry(raw)["name"])
        return sorted(names)

    def staged_digests(self) -> dict[str, str]:
        """Pending additions as name -> blob digest, without loading contents."""
        result: dict[str, str] = {}
        for key in self.store.keys(ADDITION % ""):
            raw = self.store.get(key)
            if raw is not None:
                entry = _load_entry(raw)
                result[entry["name"]] = entry["blob"]
        return result

    def is_staged_for_addition(self, name: str) -> bool:
        raw = self.store.get(ADDITION % stage_key(name))
        return raw is not None and _load_entry(raw)["name"] == name

    def is_staged_for_removal(self, name: str) -> bool:
        raw = self.store.get(REMOVAL % stage_key(name))
        return raw is not None and _load_entry(raw)["name"] == name

    def is_empty(self) -> bool:
        return not any(self.store.keys(ADDITION % "")) and not any(
            self.store.keys(REMOVAL % "")
        )

    # -- Write operations --

    def stage_for_addition(self, blob: Blob, tracked: Mapping[str, str]) -> bool:
        """Stage ``blob`` unless HEAD already tracks identical contents.

        Args:
            blob: Snapshot of the working file.
            tracked: HEAD's tracked-file mapping.

        Returns:
            True if the blob was staged, False if the file is unchanged
            relative to HEAD (any earlier pending addition is dropped).
        """
        if self.is_staged_for_removal(blob.name):
            self.store.remove(REMOVAL % stage_key(blob.name))
        if tracked.get(blob.name) == blob.digest:
            if self.is_staged_for_addition(blob.name):
                self.store.remove(ADDITION % stage_key(blob.name))
            logger.debug("stage.unchanged", name=blob.name)
            return False
        digest = self.objects.put(blob)
        entry = {"name": blob.name, "blob": digest}
        self.store.set(ADDITION % stage_key(blob.name), json.dumps(entry).encode())
        logger.debug("stage.added", name=blob.name, blob=digest)
        return True

    def stage_for_removal(self, name: str, tracked: Mapping[str, str]) -> bool:
        """Stage ``name`` for removal.

        A file only pending addition is simply unstaged. A file tracked
        by HEAD is recorded as a removal.

        Returns:
            True if HEAD tracks the file, meaning its working copy
            should be deleted by the caller.

        Raises:
            NothingToRemove: The file is neither staged nor tracked.
        """
        was_staged = self.is_staged_for_addition(name)
        if was_staged:
            self.store.remove(ADDITION % stage_key(name))
        if name in tracked:
            entry = {"name": name}
            self.store.set(REMOVAL % stage_key(name), json.dumps(entry).encode())
            logger.debug("stage.removed", name=name)
            return True
        if not was_staged:
            raise NothingToRemove()
        logger.debug("stage.unstaged", name=name)
        return False

    def clear(self) -> None:
        """Drop every pending addition and removal."""
        keys = [*self.store.keys(ADDITION % ""), *self.store.keys(REMOVAL % "")]
        if keys:
            self.store.remove_many(*keys)

    def apply(self, tracked: Mapping[str, str]) -> dict[str, str]:
        """Return ``tracked`` with every pending addition and removal applied."""
        files = dict(tracked)
        files.update(self.staged_digests())
        for name in self.removals():
            files.pop(name, None)
        return files
