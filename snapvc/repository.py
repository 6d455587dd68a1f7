"""Repository handle: every user-level operation on one working tree."""

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping

from . import remote as sync
from .config import Settings
from .errors import (
    AlreadyInitialized,
    AlreadyOnBranch,
    AlreadyUpToDate,
    BranchNotFound,
    CannotMergeSelf,
    CommitNotFound,
    EmptyMessage,
    EmptyStagingArea,
    FileNotInCommit,
    InvalidName,
    NotInitialized,
    RemoteNotFound,
    UncommittedChanges,
    UntrackedFileConflict,
)
from .graph import find_lca, history
from .kv.base import KVStore
from .kv.files import Files
from .log import get_logger
from .merge import MergeResult, conflict_contents, plan_merge
from .object_store import ObjectStore
from .objects import Blob, Commit, initial_commit, sha1_hex
from .refs import DEFAULT_BRANCH, HEAD_KEY, Remote, RefStore, shadow_name
from .remote import SyncResult
from .staging import StagingArea
from .worktree import WorkingTree

logger = get_logger(__name__)


@dataclass(frozen=True)
class Status:
    """Snapshot of branches, staged changes and working-tree changes."""

    current_branch: str
    branches: tuple[str, ...]
    staged: tuple[str, ...]
    removed: tuple[str, ...]
    modified: tuple[str, ...]  # "name (modified)" or "name (deleted)"
    untracked: tuple[str, ...]

    @property
    def clean(self) -> bool:
        return not (self.staged or self.removed or self.modified or self.untracked)


def _check_name(name: str, what: str) -> None:
    if not name or "/" in name or name.startswith(".") or name.strip() != name:
        raise InvalidName(f"Invalid {what} name: {name!r}")


class Repository:
    """A repository: object store, refs and staging area over one KV
    store, plus the working tree they describe.

    Args:
        store: Backend holding every object, ref and stage entry.
        worktree: The working directory.
        settings: Repository settings (defaults to ``Settings()``).
        clock: Source of commit timestamps, in epoch seconds.
        remote_opener: Opens the repository a ``Remote`` points at.
            Defaults to opening its path with this repository's storage
            kind.
    """

    def __init__(
        self,
        store: KVStore,
        worktree: WorkingTree,
        *,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.time,
        remote_opener: Callable[[Remote], "Repository"] | None = None,
    ) -> None:
        self.store = store
        self.worktree = worktree
        self.settings = settings or Settings()
        self.objects = ObjectStore(store)
        self.refs = RefStore(store)
        self.staging = StagingArea(store, self.objects)
        self._clock = clock
        self._remote_opener = remote_opener

    def __enter__(self) -> "Repository":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        close = getattr(self.store, "close", None)
        if close is not None:
            close()

    @property
    def is_initialized(self) -> bool:
        return HEAD_KEY in self.store

    def initialize(self) -> str:
        """Write the initial commit and point ``master`` and HEAD at it."""
        if self.is_initialized:
            raise AlreadyInitialized()
        digest = self.objects.put(initial_commit())
        self.refs.set_branch(DEFAULT_BRANCH, digest)
        self.refs.set_current_branch(DEFAULT_BRANCH)
        logger.info("repository.initialized", commit=digest)
        return digest

    # -- Read operations --

    def head(self) -> Commit:
        """The commit the current branch points at."""
        return self.objects.get_commit(self.refs.head_commit())

    def log(self) -> list[Commit]:
        """Commits on the first-parent chain from HEAD, newest first."""
        return [
            self.objects.get_commit(d)
            for d in history(self.objects, self.refs.head_commit())
        ]

    def global_log(self) -> list[Commit]:
        """Every commit in the object store, in digest order."""
        return [self.objects.get_commit(d) for d in self.objects.commits()]

    def find(self, message: str) -> list[str]:
        """Digests of all commits whose message is exactly ``message``."""
        found = [
            d
            for d in self.objects.commits()
            if self.objects.get_commit(d).message == message
        ]
        if not found:
            raise CommitNotFound("Found no commit with that message.")
        return found

    def status(self) -> Status:
        tracked = self.head().files
        staged = self.staging.staged_digests()
        removed = set(self.staging.removals())
        present = set(self.worktree.files())
        current = {name: sha1_hex(self.worktree.read(name)) for name in present}

        modified: list[str] = []
        for name in sorted({*tracked, *staged}):
            expected = staged.get(name, tracked.get(name))
            if name not in present:
                if name in staged or name not in removed:
                    modified.append(f"{name} (deleted)")
            elif current[name] != expected and name not in removed:
                modified.append(f"{name} (modified)")

        untracked = sorted(
            name
            for name in present
            if name not in staged and (name not in tracked or name in removed)
        )
        return Status(
            current_branch=self.refs.current_branch(),
            branches=tuple(self.refs.branches()),
            staged=tuple(sorted(staged)),
            removed=tuple(sorted(removed)),
            modified=tuple(modified),
            untracked=tuple(untracked),
        )

    # -- Staging and committing --

    def add(self, name: str) -> bool:
        """Stage the working copy of ``name``.

        Returns:
            False when the file matches HEAD and nothing was staged.
        """
        blob = Blob(name=name, contents=self.worktree.read(name))
        return self.staging.stage_for_addition(blob, self.head().files)

    def rm(self, name: str) -> None:
        """Unstage ``name``, and stop tracking and delete it if HEAD tracks it."""
        if self.staging.stage_for_removal(name, self.head().files):
            self.worktree.delete(name)

    def commit(
        self,
        message: str,
        other_parent: str | None = None,
        *,
        allow_empty: bool = False,
    ) -> str:
        """Turn the staged delta into a new commit on the current branch.

        Args:
            message: Commit message; must not be blank.
            other_parent: Second parent digest, for merge commits.
            allow_empty: Commit even with nothing staged.

        Returns:
            The new commit's digest.
        """
        if not allow_empty and self.staging.is_empty():
            raise EmptyStagingArea()
        if not message or not message.strip():
            raise EmptyMessage()

        parent = self.refs.head_commit()
        files = self.staging.apply(self.objects.get_commit(parent).files)
        commit = Commit(
            message=message,
            timestamp=int(self._clock()),
            parent=parent,
            other_parent=other_parent,
            files=files,
        )
        digest = self.objects.put(commit)
        self.refs.advance_head(digest)
        self.staging.clear()
        logger.info(
            "commit.created", commit=digest, parent=parent, files=len(files)
        )
        return digest

    # -- Checkout and reset --

    def checkout_file(self, name: str) -> None:
        """Restore ``name`` in the working tree from HEAD."""
        self._restore_file(self.head(), name)

    def checkout_file_at(self, commit_id: str, name: str) -> None:
        """Restore ``name`` from the commit ``commit_id`` (may be abbreviated)."""
        commit = self.objects.get_commit(self.objects.resolve(commit_id))
        self._restore_file(commit, name)

    def checkout_branch(self, name: str) -> None:
        """Switch to branch ``name``, replacing the tracked working files."""
        if not self.refs.has_branch(name):
            raise BranchNotFound("No such branch exists.")
        if name == self.refs.current_branch():
            raise AlreadyOnBranch()
        target = self.objects.get_commit(self.refs.get_branch(name).commit)
        self._replace_tree(target)
        self.staging.clear()
        self.refs.set_current_branch(name)
        logger.info("checkout.branch", branch=name)

    def reset(self, commit_id: str) -> str:
        """Move the current branch to ``commit_id`` and check out its files."""
        digest = self.objects.resolve(commit_id)
        self._replace_tree(self.objects.get_commit(digest))
        self.staging.clear()
        self.refs.advance_head(digest)
        logger.info("reset.done", commit=digest)
        return digest

    # -- Branches --

    def branch(self, name: str) -> None:
        """Create branch ``name`` at HEAD without switching to it."""
        _check_name(name, "branch")
        self.refs.create_branch(name, self.refs.head_commit())

    def rm_branch(self, name: str) -> None:
        self.refs.delete_branch(name)

    # -- Merge --

    def merge(self, branch: str) -> MergeResult:
        """Merge ``branch`` into the current branch.

        A branch whose head already descends from HEAD is
        fast-forwarded. Otherwise every file is reconciled against the
        split point and a two-parent merge commit is created; conflicted
        files get marker blocks and are committed as such.

        Raises:
            BranchNotFound, CannotMergeSelf, UncommittedChanges,
            AlreadyUpToDate, UntrackedFileConflict: Nothing was changed.
        """
        if not self.refs.has_branch(branch):
            raise BranchNotFound()
        current = self.refs.current_branch()
        if branch == current:
            raise CannotMergeSelf()
        if not self.staging.is_empty():
            raise UncommittedChanges()

        head_digest = self.refs.head_commit()
        other_digest = self.refs.get_branch(branch).commit
        split = find_lca(
            self.objects,
            head_digest,
            other_digest,
            all_parents=self.settings.lca == "all-parents",
        )
        if split == other_digest:
            raise AlreadyUpToDate()

        head = self.objects.get_commit(head_digest)
        other = self.objects.get_commit(other_digest)
        if split == head_digest:
            self._replace_tree(other)
            self.staging.clear()
            self.refs.advance_head(other_digest)
            logger.info("merge.fast_forward", branch=branch, commit=other_digest)
            return MergeResult(
                merged=True, commit=other_digest, strategy="fast_forward"
            )

        base = self.objects.get_commit(split)
        plan = plan_merge(head.files, other.files, base.files)
        in_the_way = [
            name
            for name in plan.touched
            if name not in head.files and self.worktree.exists(name)
        ]
        if in_the_way:
            raise UntrackedFileConflict(in_the_way)

        for name, digest in plan.take_other.items():
            contents = self.objects.get_blob(digest).contents
            self.worktree.write(name, contents)
            self.staging.stage_for_addition(Blob(name, contents), head.files)
        for name in plan.remove:
            self.staging.stage_for_removal(name, head.files)
            self.worktree.delete(name)
        for name in plan.conflicts:
            contents = conflict_contents(
                self._contents(head.files, name), self._contents(other.files, name)
            )
            self.worktree.write(name, contents)
            self.staging.stage_for_addition(Blob(name, contents), head.files)
            logger.info("merge.conflict", branch=branch, file=name)
        # Files only HEAD changed already hold HEAD's version; nothing to stage.

        digest = self.commit(
            f"Merged {branch} into {current}.", other_digest, allow_empty=True
        )
        return MergeResult(
            merged=True,
            commit=digest,
            strategy="three_way",
            conflicts=plan.conflicts,
            taken_files=tuple(plan.take_other),
            removed_files=plan.remove,
        )

    # -- Remotes --

    def add_remote(self, name: str, path: str) -> Remote:
        _check_name(name, "remote")
        return self.refs.add_remote(name, path)

    def rm_remote(self, name: str) -> None:
        self.refs.remove_remote(name)

    def push(self, remote_name: str, branch: str) -> SyncResult:
        """Append HEAD's history to ``branch`` on the remote."""
        with self._open_remote(remote_name) as other:
            return sync.push(
                self.objects, self.refs, other.objects, other.refs, remote_name, branch
            )

    def fetch(self, remote_name: str, branch: str) -> SyncResult:
        """Copy the remote ``branch`` into the shadow branch ``<remote>/<branch>``."""
        with self._open_remote(remote_name) as other:
            return sync.fetch(
                self.objects, self.refs, other.objects, other.refs, remote_name, branch
            )

    def pull(self, remote_name: str, branch: str) -> MergeResult:
        """Fetch ``branch`` from the remote, then merge its shadow branch."""
        self.fetch(remote_name, branch)
        return self.merge(shadow_name(remote_name, branch))

    # -- Internal --

    def _open_remote(self, name: str) -> "Repository":
        remote = self.refs.get_remote(name)
        if self._remote_opener is not None:
            return self._remote_opener(remote)
        path = Path(remote.path)
        if not path.is_absolute():
            path = self.worktree.root / path
        return open_marker_dir(path, settings=self.settings, clock=self._clock)

    def _contents(self, files: Mapping[str, str], name: str) -> bytes | None:
        digest = files.get(name)
        if digest is None:
            return None
        return self.objects.get_blob(digest).contents

    def _restore_file(self, commit: Commit, name: str) -> None:
        contents = self._contents(commit.files, name)
        if contents is None:
            raise FileNotInCommit()
        self.worktree.write(name, contents)

    def _replace_tree(self, target: Commit) -> None:
        """Make the working tree match ``target``'s tracked files.

        Files tracked by HEAD but not by ``target`` are deleted;
        untracked files are left alone unless ``target`` would
        overwrite them with different contents, which is refused.
        """
        tracked = self.head().files
        in_the_way = [
            name
            for name in self.worktree.files()
            if name not in tracked
            and name in target.files
            and sha1_hex(self.worktree.read(name)) != target.files[name]
        ]
        if in_the_way:
            raise UntrackedFileConflict(in_the_way)

        for name, digest in target.files.items():
            self.worktree.write(name, self.objects.get_blob(digest).contents)
        for name in tracked:
            if name not in target.files:
                self.worktree.delete(name)


def _backend(root: Path, storage: str) -> KVStore:
    if storage == "files":
        return Files(root)
    if storage == "disk":
        from .kv.disk import Disk

        return Disk(str(root))
    raise ValueError(f"Unknown storage: {storage!r}")


def init(
    workdir: str | os.PathLike = ".",
    *,
    settings: Settings | None = None,
    clock: Callable[[], float] = time.time,
) -> Repository:
    """Create a repository in ``workdir``.

    Raises:
        AlreadyInitialized: The marker directory already exists.
    """
    settings = settings or Settings()
    root = Path(workdir) / settings.repo_dir
    if root.exists():
        raise AlreadyInitialized()
    root.mkdir(parents=True)
    repo = Repository(
        _backend(root, settings.storage),
        WorkingTree(workdir),
        settings=settings,
        clock=clock,
    )
    repo.initialize()
    return repo


def open_repository(
    workdir: str | os.PathLike = ".",
    *,
    settings: Settings | None = None,
    clock: Callable[[], float] = time.time,
) -> Repository:
    """Open the repository whose working tree is ``workdir``.

    Raises:
        NotInitialized: ``workdir`` holds no repository.
    """
    settings = settings or Settings()
    root = Path(workdir) / settings.repo_dir
    if not root.is_dir():
        raise NotInitialized()
    repo = Repository(
        _backend(root, settings.storage),
        WorkingTree(workdir),
        settings=settings,
        clock=clock,
    )
    if not repo.is_initialized:
        repo.close()
        raise NotInitialized()
    return repo


def open_marker_dir(
    path: str | os.PathLike,
    *,
    settings: Settings | None = None,
    clock: Callable[[], float] = time.time,
) -> Repository:
    """Open a repository given its marker directory, as remotes name it.

    Raises:
        RemoteNotFound: ``path`` is not a repository.
    """
    settings = settings or Settings()
    root = Path(path)
    if not root.is_dir():
        raise RemoteNotFound()
    repo = Repository(
        _backend(root, settings.storage),
        WorkingTree(root.parent),
        settings=settings,
        clock=clock,
    )
    if not repo.is_initialized:
        repo.close()
        raise RemoteNotFound()
    return repo
