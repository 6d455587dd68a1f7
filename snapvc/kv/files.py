"""Filesystem KV store: one plain file per key."""

import os
import tempfile
from pathlib import Path
from typing import Iterable, Mapping

from .base import KVStore

# Writes are staged here, then renamed into place. No key may start with it.
TMP_DIR = "tmp"


class Files(KVStore):
    """KV store that maps each key onto a file under ``root``.

    ``objects/commits/<digest>`` is stored at
    ``<root>/objects/commits/<digest>``, which makes the repository
    layout directly inspectable on disk.
    """

    def __init__(self, root: str | os.PathLike) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        parts = key.split("/")
        if not key or key.startswith("/") or any(p in ("", ".", "..") for p in parts):
            raise ValueError(f"Invalid key: {key!r}")
        if parts[0] == TMP_DIR:
            raise ValueError(f"Invalid key: {key!r} (reserved)")
        return self.root.joinpath(*parts)

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_bytes()

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_dir = self.root / TMP_DIR
        tmp_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=tmp_dir)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(value)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def set_many(self, items: Mapping[str, bytes]) -> None:
        for key, value in items.items():
            if not isinstance(value, bytes):
                raise TypeError(f"Expected bytes for {key}, got {type(value).__name__}")
        for key, value in items.items():
            self.set(key, value)

    def keys(self, prefix: str = "") -> Iterable[str]:
        directory, _, _ = prefix.rpartition("/")
        base = self._path(directory) if directory else self.root
        if not base.is_dir():
            return []
        found = []
        for path in base.rglob("*"):
            if not path.is_file():
                continue
            key = path.relative_to(self.root).as_posix()
            if key.split("/", 1)[0] == TMP_DIR:
                continue
            if key.startswith(prefix):
                found.append(key)
        return sorted(found)

    def __contains__(self, key: str) -> bool:
        return self._path(key).is_file()

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def remove_many(self, *keys: str) -> None:
        for key in keys:
            self.remove(key)
