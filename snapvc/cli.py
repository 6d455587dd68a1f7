"""The command-line interface for snapvc.

``main`` is the only place where errors become exit statuses: every
command lets ``SnapvcError`` propagate and ``main`` prints its message.
"""

import sys
import time
from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from .config import Settings
from .errors import InvalidName, SnapvcError
from .log import configure_logging
from .objects import Commit
from .repository import Repository, init as init_repository, open_repository

app = App(
    name="snapvc", help="A local version-control engine.", help_on_error=True
)
console = Console(highlight=False, markup=False, soft_wrap=True)

DATE_FORMAT = "%a %b %d %H:%M:%S %Y %z"


def _repo() -> Repository:
    return open_repository(Path.cwd(), settings=Settings.from_env())


def format_commit(commit: Commit) -> str:
    """Render one commit the way ``log`` and ``global-log`` show it."""
    lines = ["===", f"commit {commit.digest}"]
    if commit.is_merge:
        lines.append(f"Merge: {commit.parent[:7]} {commit.other_parent[:7]}")
    date = time.strftime(DATE_FORMAT, time.localtime(commit.timestamp))
    lines.append(f"Date: {date}")
    lines.append(commit.message)
    return "\n".join(lines) + "\n"


@app.command(name="init")
def init_cmd() -> None:
    """Create a repository in the current directory."""
    init_repository(Path.cwd(), settings=Settings.from_env()).close()


@app.command(name="add")
def add(file: str) -> None:
    """Stage a file for the next commit."""
    with _repo() as repo:
        repo.add(file)


@app.command(name="commit")
def commit(message: Annotated[str, Parameter(allow_leading_hyphen=True)] = "") -> None:
    """Commit the staged changes."""
    with _repo() as repo:
        repo.commit(message)


@app.command(name="rm")
def rm(file: str) -> None:
    """Unstage a file, or stop tracking it and delete it."""
    with _repo() as repo:
        repo.rm(file)


@app.command(name="log")
def log() -> None:
    """Show the first-parent history of the current branch."""
    with _repo() as repo:
        for entry in repo.log():
            console.print(format_commit(entry))


@app.command(name="global-log")
def global_log() -> None:
    """Show every commit ever made."""
    with _repo() as repo:
        for entry in repo.global_log():
            console.print(format_commit(entry))


@app.command(name="find")
def find(message: str) -> None:
    """Print the ids of all commits with the given message."""
    with _repo() as repo:
        for digest in repo.find(message):
            console.print(digest)


@app.command(name="status")
def status() -> None:
    """Show branches, staged files and working-tree changes."""
    with _repo() as repo:
        st = repo.status()
    console.print("=== Branches ===")
    for name in st.branches:
        console.print(f"*{name}" if name == st.current_branch else name)
    sections = [
        ("Staged Files", st.staged),
        ("Removed Files", st.removed),
        ("Modifications Not Staged For Commit", st.modified),
        ("Untracked Files", st.untracked),
    ]
    for title, names in sections:
        console.print(f"\n=== {title} ===")
        for name in names:
            console.print(name)
    console.print()


def checkout(*tokens: str) -> None:
    """Restore files or switch branches.

    ``checkout -- FILE`` restores FILE from HEAD, ``checkout COMMIT --
    FILE`` restores it from COMMIT, ``checkout BRANCH`` switches branch.
    """
    with _repo() as repo:
        if len(tokens) == 2 and tokens[0] == "--":
            repo.checkout_file(tokens[1])
        elif len(tokens) == 3 and tokens[1] == "--":
            repo.checkout_file_at(tokens[0], tokens[2])
        elif len(tokens) == 1:
            repo.checkout_branch(tokens[0])
        else:
            raise InvalidName("Incorrect operands.")


@app.command(name="checkout")
def _checkout(
    *tokens: Annotated[str, Parameter(allow_leading_hyphen=True)],
) -> None:
    """Restore files (`-- FILE`, `COMMIT -- FILE`) or switch to BRANCH."""
    checkout(*tokens)


@app.command(name="branch")
def branch(name: str) -> None:
    """Create a branch at the current commit."""
    with _repo() as repo:
        repo.branch(name)


@app.command(name="rm-branch")
def rm_branch(name: str) -> None:
    """Delete a branch pointer."""
    with _repo() as repo:
        repo.rm_branch(name)


@app.command(name="reset")
def reset(commit_id: str) -> None:
    """Check out every file of a commit and move the branch there."""
    with _repo() as repo:
        repo.reset(commit_id)


@app.command(name="merge")
def merge(branch: str) -> None:
    """Merge a branch into the current branch."""
    with _repo() as repo:
        result = repo.merge(branch)
    if result.strategy == "fast_forward":
        console.print("Current branch fast-forwarded.")
    elif result.had_conflicts:
        console.print("Encountered a merge conflict.")


@app.command(name="add-remote")
def add_remote(name: str, path: str) -> None:
    """Register another repository's marker directory as a remote."""
    with _repo() as repo:
        repo.add_remote(name, path)


@app.command(name="rm-remote")
def rm_remote(name: str) -> None:
    """Forget a remote."""
    with _repo() as repo:
        repo.rm_remote(name)


@app.command(name="push")
def push(remote: str, branch: str) -> None:
    """Append the current history to a remote branch."""
    with _repo() as repo:
        repo.push(remote, branch)


@app.command(name="fetch")
def fetch(remote: str, branch: str) -> None:
    """Copy a remote branch into the local shadow branch REMOTE/BRANCH."""
    with _repo() as repo:
        repo.fetch(remote, branch)


@app.command(name="pull")
def pull(remote: str, branch: str) -> None:
    """Fetch a remote branch and merge it."""
    with _repo() as repo:
        result = repo.pull(remote, branch)
    if result.strategy == "fast_forward":
        console.print("Current branch fast-forwarded.")
    elif result.had_conflicts:
        console.print("Encountered a merge conflict.")


def main(tokens: list[str] | None = None) -> int:
    """Run one command and return the process exit status."""
    if tokens is None:
        tokens = sys.argv[1:]
    try:
        settings = Settings.from_env()
    except ValueError as e:
        console.print(f"Invalid configuration: {e}")
        return 2
    configure_logging(settings.log_level)

    if not tokens:
        console.print("Please enter a command.")
        return 1
    try:
        if tokens[0] == "checkout":
            # Dispatched directly so that "--" reaches checkout intact.
            checkout(*tokens[1:])
        else:
            app(tokens)
    except SnapvcError as e:
        console.print(str(e))
        return 1
    except SystemExit as e:
        # cyclopts exits on usage errors and after --help
        if e.code is None:
            return 0
        return e.code if isinstance(e.code, int) else 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
