"""Raw access to files in the working directory."""

import os
from pathlib import Path

from .errors import FileNotFound, InvalidName


class WorkingTree:
    """The plain files directly inside a working directory.

    Only top-level regular files are considered; subdirectories (the
    repository marker directory among them) are ignored.
    """

    def __init__(self, root: str | os.PathLike) -> None:
        self.root = Path(root)

    def _path(self, name: str) -> Path:
        if not name or name in (".", "..") or "/" in name or os.sep in name:
            raise InvalidName(f"Not a plain file name: {name!r}")
        return self.root / name

    def files(self) -> list[str]:
        """Names of all plain files in the working directory, sorted."""
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_file())

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()

    def read(self, name: str) -> bytes:
        path = self._path(name)
        if not path.is_file():
            raise FileNotFound()
        return path.read_bytes()

    def write(self, name: str, contents: bytes) -> None:
        self._path(name).write_bytes(contents)

    def delete(self, name: str) -> None:
        self._path(name).unlink(missing_ok=True)
