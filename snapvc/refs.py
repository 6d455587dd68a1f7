"""Branches, HEAD, remotes and remote shadow branches."""

import json
from dataclasses import asdict, dataclass

from .errors import (
    BranchAlreadyExists,
    BranchNotFound,
    CannotRemoveCurrentBranch,
    CorruptObject,
    InvalidName,
    RemoteAlreadyExists,
    RemoteNotFound,
)
from .kv.base import KVStore

HEADS = "refs/heads/%s"
HEAD_KEY = "HEAD"
REMOTE_HEAD_KEY = "REMOTE_HEAD"
REMOTE_KEY = "objects/remotes/%s"
DEFAULT_BRANCH = "master"


def shadow_name(remote: str, branch: str) -> str:
    """Branch name under which a remote branch is cached locally."""
    return f"{remote}/{branch}"


@dataclass(frozen=True)
class Branch:
    """Named pointer to a commit digest."""

    name: str
    commit: str


@dataclass(frozen=True)
class Remote:
    """Named path to another repository's marker directory."""

    name: str
    path: str


def _dump(record) -> bytes:
    return json.dumps(asdict(record), sort_keys=True).encode()


def _load(raw: bytes, cls):
    try:
        return cls(**json.loads(raw))
    except (ValueError, TypeError) as e:
        raise CorruptObject(f"Invalid {cls.__name__.lower()} record: {e}") from e


class RefStore:
    """Mutable references of one repository.

    Branch ``name`` lives at ``refs/heads/<name>``; HEAD holds the ref
    path of the current branch rather than a digest, so switching
    branches never touches branch records.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    # -- Branches --

    def has_branch(self, name: str) -> bool:
        return bool(name) and HEADS % name in self.store

    def get_branch(self, name: str) -> Branch:
        raw = self.store.get(HEADS % name) if name else None
        if raw is None:
            raise BranchNotFound()
        return _load(raw, Branch)

    def create_branch(self, name: str, commit: str) -> Branch:
        """Create a local branch.

        A local branch file and a remote's shadow directory would share
        the path ``refs/heads/<name>``, so remote names are refused.
        """
        if self.has_branch(name):
            raise BranchAlreadyExists()
        if self.is_remote_namespace(name):
            raise InvalidName("A remote with that name already exists.")
        return self.set_branch(name, commit)

    def set_branch(self, name: str, commit: str) -> Branch:
        """Create or move a branch."""
        branch = Branch(name=name, commit=commit)
        self.store.set(HEADS % name, _dump(branch))
        return branch

    def delete_branch(self, name: str) -> None:
        if not self.has_branch(name):
            raise BranchNotFound()
        if name == self.current_branch():
            raise CannotRemoveCurrentBranch()
        self.store.remove(HEADS % name)

    def branches(self) -> list[str]:
        """Local branch names, sorted. Shadow branches are excluded."""
        prefix = HEADS % ""
        names = (key[len(prefix):] for key in self.store.keys(prefix))
        return sorted(name for name in names if "/" not in name)

    # -- HEAD --

    def current_branch(self) -> str:
        raw = self.store.get(HEAD_KEY)
        if raw is None:
            raise BranchNotFound("HEAD does not point at a branch.")
        return raw.decode().strip().removeprefix(HEADS % "")

    def set_current_branch(self, name: str) -> None:
        if not self.has_branch(name):
            raise BranchNotFound()
        self.store.set(HEAD_KEY, (HEADS % name).encode())

    def head_commit(self) -> str:
        return self.get_branch(self.current_branch()).commit

    def advance_head(self, commit: str) -> Branch:
        """Move the current branch to ``commit``."""
        return self.set_branch(self.current_branch(), commit)

    # -- Remotes --

    def add_remote(self, name: str, path: str) -> Remote:
        if REMOTE_KEY % name in self.store:
            raise RemoteAlreadyExists()
        if self.has_branch(name):
            raise InvalidName("A branch with that name already exists.")
        remote = Remote(name=name, path=path)
        self.store.set(REMOTE_KEY % name, _dump(remote))
        return remote

    def get_remote(self, name: str) -> Remote:
        raw = self.store.get(REMOTE_KEY % name) if name else None
        if raw is None:
            raise RemoteNotFound()
        return _load(raw, Remote)

    def remove_remote(self, name: str) -> None:
        if not name or REMOTE_KEY % name not in self.store:
            raise RemoteNotFound("A remote with that name does not exist.")
        self.store.remove(REMOTE_KEY % name)

    def remotes(self) -> list[str]:
        prefix = REMOTE_KEY % ""
        return sorted(key[len(prefix):] for key in self.store.keys(prefix))

    def is_remote_namespace(self, name: str) -> bool:
        """True if ``name`` is a registered remote or prefixes a shadow branch."""
        return REMOTE_KEY % name in self.store or any(
            self.store.keys(HEADS % shadow_name(name, ""))
        )

    def set_shadow(self, remote: str, branch: str, commit: str) -> Branch:
        """Record the last known head of ``remote``'s ``branch``."""
        name = shadow_name(remote, branch)
        shadow = Branch(name=name, commit=commit)
        self.store.set_many(
            {
                HEADS % name: _dump(shadow),
                REMOTE_HEAD_KEY: (HEADS % name).encode(),
            }
        )
        return shadow

    def remote_head(self) -> str | None:
        """Name of the last shadow branch touched by push or fetch."""
        raw = self.store.get(REMOTE_HEAD_KEY)
        if raw is None:
            return None
        return raw.decode().strip().removeprefix(HEADS % "")
