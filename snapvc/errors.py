"""snapvc error types.

Every failure a user can trigger is a ``SnapvcError``. Core operations
raise; only the CLI turns them into an exit status.
"""


class SnapvcError(Exception):
    """Base class for user-facing repository errors."""

    message = "snapvc error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class NotInitialized(SnapvcError):
    message = "Not in an initialized snapvc directory."


class AlreadyInitialized(SnapvcError):
    message = (
        "A snapvc version-control system already exists in the current directory."
    )


class FileNotFound(SnapvcError):
    message = "File does not exist."


class NothingToRemove(SnapvcError):
    message = "No reason to remove the file."


class EmptyStagingArea(SnapvcError):
    message = "No changes added to the commit."


class EmptyMessage(SnapvcError):
    message = "Please enter a commit message."


class CommitNotFound(SnapvcError):
    message = "No commit with that id exists."


class AmbiguousDigest(CommitNotFound):
    """Raised when a short digest matches more than one commit.

    Attributes:
        matches: The sorted digests sharing the prefix.
    """

    def __init__(self, prefix: str, matches: list[str]) -> None:
        self.prefix = prefix
        self.matches = matches
        super().__init__(
            f"Commit id {prefix} is ambiguous ({len(matches)} matches)."
        )


class ObjectNotFound(SnapvcError):
    message = "No object with that id exists."


class CorruptObject(SnapvcError):
    message = "Stored object could not be decoded."


class FileNotInCommit(SnapvcError):
    message = "File does not exist in that commit."


class BranchNotFound(SnapvcError):
    message = "A branch with that name does not exist."


class BranchAlreadyExists(SnapvcError):
    message = "A branch with that name already exists."


class CannotRemoveCurrentBranch(SnapvcError):
    message = "Cannot remove the current branch."


class AlreadyOnBranch(SnapvcError):
    message = "No need to checkout the current branch."


class UntrackedFileConflict(SnapvcError):
    """Raised when an operation would overwrite an untracked working file.

    Attributes:
        files: The untracked file names in the way.
    """

    message = (
        "There is an untracked file in the way; delete it, "
        "or add and commit it first."
    )

    def __init__(self, files: list[str] | None = None) -> None:
        self.files = files or []
        super().__init__()


class AlreadyUpToDate(SnapvcError):
    message = "Given branch is an ancestor of the current branch."


class CannotMergeSelf(SnapvcError):
    message = "Cannot merge a branch with itself."


class UncommittedChanges(SnapvcError):
    message = "You have uncommitted changes."


class NoCommonAncestor(SnapvcError):
    message = "No common ancestor found between the two branches."


class DivergedHistory(SnapvcError):
    message = "Please pull down remote changes before pushing."


class RemoteNotFound(SnapvcError):
    message = "Remote directory not found."


class RemoteAlreadyExists(SnapvcError):
    message = "A remote with that name already exists."


class InvalidName(SnapvcError):
    message = "That name cannot be used."
