"""snapvc: a local version-control engine."""

from .config import Settings
from .errors import (
    AlreadyInitialized,
    AlreadyOnBranch,
    AlreadyUpToDate,
    AmbiguousDigest,
    BranchAlreadyExists,
    BranchNotFound,
    CannotMergeSelf,
    CannotRemoveCurrentBranch,
    CommitNotFound,
    CorruptObject,
    DivergedHistory,
    EmptyMessage,
    EmptyStagingArea,
    FileNotFound,
    FileNotInCommit,
    InvalidName,
    NoCommonAncestor,
    NothingToRemove,
    NotInitialized,
    ObjectNotFound,
    RemoteAlreadyExists,
    RemoteNotFound,
    SnapvcError,
    UncommittedChanges,
    UntrackedFileConflict,
)
from .kv.base import KVStore
from .merge import MergePlan, MergeResult
from .object_store import ObjectStore
from .objects import Blob, Commit
from .refs import Branch, RefStore, Remote
from .remote import SyncResult
from .repository import Repository, Status, init, open_marker_dir, open_repository
from .staging import StagingArea
from .worktree import WorkingTree

__all__ = [
    "AlreadyInitialized",
    "AlreadyOnBranch",
    "AlreadyUpToDate",
    "AmbiguousDigest",
    "Blob",
    "Branch",
    "BranchAlreadyExists",
    "BranchNotFound",
    "CannotMergeSelf",
    "CannotRemoveCurrentBranch",
    "Commit",
    "CommitNotFound",
    "CorruptObject",
    "DivergedHistory",
    "EmptyMessage",
    "EmptyStagingArea",
    "FileNotFound",
    "FileNotInCommit",
    "InvalidName",
    "KVStore",
    "MergePlan",
    "MergeResult",
    "NoCommonAncestor",
    "NotInitialized",
    "NothingToRemove",
    "ObjectNotFound",
    "ObjectStore",
    "RefStore",
    "Remote",
    "RemoteAlreadyExists",
    "RemoteNotFound",
    "Repository",
    "Settings",
    "SnapvcError",
    "StagingArea",
    "Status",
    "SyncResult",
    "UncommittedChanges",
    "UntrackedFileConflict",
    "WorkingTree",
    "init",
    "open_marker_dir",
    "open_repository",
]
