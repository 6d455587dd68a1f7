"""Synchronization of commits and blobs between two repositories.

Both directions walk a first-parent chain read-only first, then copy
the missing objects oldest-first with every commit's blobs written
before the commit itself. An interrupted transfer therefore leaves only
complete commits behind, and a retry resumes where it stopped. Branch
pointers move only after the whole chain has been copied.
"""

from dataclasses import dataclass

from .errors import BranchNotFound, CorruptObject, DivergedHistory
from .log import get_logger
from .object_store import ObjectStore
from .objects import Commit
from .refs import RefStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a push or fetch."""

    remote: str
    branch: str
    head: str
    copied_commits: tuple[str, ...]
    copied_blobs: int

    @property
    def up_to_date(self) -> bool:
        return not self.copied_commits


def _copy_commit(
    source: ObjectStore, target: ObjectStore, digest: str
) -> tuple[Commit, int]:
    """Copy one commit and any of its blobs ``target`` lacks.

    Returns:
        The commit and the number of blobs copied.
    """
    raw = source.get_raw_commit(digest)
    commit = Commit.from_bytes(raw)
    if commit.digest != digest:
        raise CorruptObject(f"Commit {digest} does not match its contents.")
    copied = _copy_blobs(source, target, commit)
    target.put_raw_commit(digest, raw)
    return commit, copied


def _copy_blobs(source: ObjectStore, target: ObjectStore, commit: Commit) -> int:
    copied = 0
    for blob in sorted(set(commit.files.values())):
        if not target.has_blob(blob):
            target.put_raw_blob(blob, source.get_raw_blob(blob))
            copied += 1
    return copied


def push(
    local_objects: ObjectStore,
    local_refs: RefStore,
    remote_objects: ObjectStore,
    remote_refs: RefStore,
    remote_name: str,
    branch: str,
) -> SyncResult:
    """Append local HEAD's history to ``branch`` of the remote.

    The remote branch head must lie on HEAD's first-parent chain. A
    branch missing on the remote is created.

    Raises:
        DivergedHistory: The remote head is not an ancestor of HEAD;
            nothing is written in that case.
    """
    head = local_refs.head_commit()
    remote_head = (
        remote_refs.get_branch(branch).commit
        if remote_refs.has_branch(branch)
        else None
    )

    chain: list[str] = []
    current: str | None = head
    while current is not None and current != remote_head:
        chain.append(current)
        current = local_objects.get_commit(current).parent
    if remote_head is not None and current is None:
        logger.info("push.diverged", remote=remote_name, branch=branch)
        raise DivergedHistory()

    copied: list[str] = []
    blobs = 0
    for digest in reversed(chain):
        if remote_objects.has_commit(digest):
            continue
        _, n = _copy_commit(local_objects, remote_objects, digest)
        copied.append(digest)
        blobs += n

    remote_refs.set_branch(branch, head)
    local_refs.set_shadow(remote_name, branch, head)
    logger.info(
        "push.done",
        remote=remote_name,
        branch=branch,
        head=head,
        commits=len(copied),
        blobs=blobs,
    )
    return SyncResult(
        remote=remote_name,
        branch=branch,
        head=head,
        copied_commits=tuple(copied),
        copied_blobs=blobs,
    )


def fetch(
    local_objects: ObjectStore,
    local_refs: RefStore,
    remote_objects: ObjectStore,
    remote_refs: RefStore,
    remote_name: str,
    branch: str,
) -> SyncResult:
    """Copy the remote ``branch`` history into the local object store.

    Walks from the remote head until a commit already present locally
    (or the root) and records the head in the shadow branch
    ``<remote>/<branch>``.

    Raises:
        BranchNotFound: The remote has no such branch.
    """
    if not remote_refs.has_branch(branch):
        raise BranchNotFound("That remote does not have that branch.")
    remote_head = remote_refs.get_branch(branch).commit

    chain: list[str] = []
    current: str | None = remote_head
    while current is not None and not local_objects.has_commit(current):
        chain.append(current)
        current = remote_objects.get_commit(current).parent

    copied: list[str] = []
    blobs = 0
    for digest in reversed(chain):
        _, n = _copy_commit(remote_objects, local_objects, digest)
        copied.append(digest)
        blobs += n
    # The head may have been present already without all of its blobs.
    blobs += _copy_blobs(
        remote_objects, local_objects, remote_objects.get_commit(remote_head)
    )

    local_refs.set_shadow(remote_name, branch, remote_head)
    logger.info(
        "fetch.done",
        remote=remote_name,
        branch=branch,
        head=remote_head,
        commits=len(copied),
        blobs=blobs,
    )
    return SyncResult(
        remote=remote_name,
        branch=branch,
        head=remote_head,
        copied_commits=tuple(copied),
        copied_blobs=blobs,
    )
