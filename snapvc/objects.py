"""Blob and Commit objects and their canonical byte forms."""

import hashlib
import json
from dataclasses import dataclass, field
from typing import Mapping

from .errors import CorruptObject

FORMAT_VERSION = 1
DIGEST_LENGTH = 40
INITIAL_MESSAGE = "initial commit"


def _to_bytes(obj) -> bytes:
    """Encode a JSON-safe Python object to canonical bytes."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":")).encode()


def _from_bytes(raw: bytes):
    """Decode canonical bytes to a Python object."""
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptObject(f"Stored object could not be decoded: {e}") from e


def sha1_hex(data: bytes) -> str:
    """Hex SHA-1 of ``data``; the digest used for every stored object."""
    return hashlib.sha1(data).hexdigest()


def _check_header(header: dict, expected_type: str) -> None:
    if header.get("type") != expected_type:
        raise CorruptObject(
            f"Expected a {expected_type} record, got {header.get('type')!r}"
        )
    if header.get("format") != FORMAT_VERSION:
        raise CorruptObject(f"Unsupported {expected_type} format {header.get('format')!r}")


@dataclass(frozen=True)
class Blob:
    """Snapshot of one file's contents at the time it was added.

    Blobs are keyed by the digest of their contents alone, so two files
    with identical bytes share a single stored object.
    """

    name: str
    contents: bytes

    @property
    def digest(self) -> str:
        return sha1_hex(self.contents)

    def to_bytes(self) -> bytes:
        header = _to_bytes({"format": FORMAT_VERSION, "name": self.name, "type": "blob"})
        return header + b"\0" + self.contents

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Blob":
        header_bytes, sep, contents = raw.partition(b"\0")
        if not sep:
            raise CorruptObject("Blob record is missing its header")
        header = _from_bytes(header_bytes)
        _check_header(header, "blob")
        return cls(name=header["name"], contents=contents)


@dataclass(frozen=True)
class Commit:
    """Immutable node in the history graph.

    ``files`` maps every tracked file name to the digest of its blob.
    The commit's own digest is derived from its serialization and is
    never stored inside it.
    """

    message: str
    timestamp: int
    parent: str | None = None
    other_parent: str | None = None
    files: Mapping[str, str] = field(default_factory=dict)

    @property
    def parents(self) -> tuple[str, ...]:
        if self.parent is None:
            return ()
        if self.other_parent is None:
            return (self.parent,)
        return (self.parent, self.other_parent)

    @property
    def is_merge(self) -> bool:
        return self.other_parent is not None

    @property
    def digest(self) -> str:
        return sha1_hex(self.to_bytes())

    def to_bytes(self) -> bytes:
        return _to_bytes(
            {
                "format": FORMAT_VERSION,
                "type": "commit",
                "message": self.message,
                "timestamp": self.timestamp,
                "parents": list(self.parents),
                "files": dict(self.files),
            }
        )

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Commit":
        record = _from_bytes(raw)
        if not isinstance(record, dict):
            raise CorruptObject("Commit record is not an object")
        _check_header(record, "commit")
        parents = record.get("parents", [])
        if len(parents) > 2:
            raise CorruptObject(f"Commit has {len(parents)} parents")
        try:
            message = record["message"]
            timestamp = record["timestamp"]
        except KeyError as e:
            raise CorruptObject(f"Commit record is missing {e}") from e
        return cls(
            message=message,
            timestamp=timestamp,
            parent=parents[0] if parents else None,
            other_parent=parents[1] if len(parents) == 2 else None,
            files=dict(record.get("files", {})),
        )


def initial_commit() -> Commit:
    """The root commit every repository starts from.

    Fixed message and a zero timestamp give every repository the same
    root digest, so histories of separately initialized repositories
    always meet.
    """
    return Commit(message=INITIAL_MESSAGE, timestamp=0)
