"""Environment-driven settings."""

import logging
from dataclasses import dataclass
from os import environ
from typing import Literal, Mapping

StorageKind = Literal["files", "disk"]
LcaMode = Literal["first-parent", "all-parents"]

DEFAULT_REPO_DIR = ".snapvc"
STORAGE_KINDS: tuple[str, ...] = ("files", "disk")
LCA_MODES: tuple[str, ...] = ("first-parent", "all-parents")


@dataclass(frozen=True)
class Settings:
    """Repository settings.

    Attributes:
        repo_dir: Name of the marker directory inside the working tree.
        storage: ``"files"`` (one file per object, default) or
            ``"disk"`` (a single diskcache database).
        lca: ``"first-parent"`` (default) follows first parents only
            when looking for a merge base; ``"all-parents"`` also walks
            second parents of merge commits.
        log_level: Threshold for CLI log output.
    """

    repo_dir: str = DEFAULT_REPO_DIR
    storage: StorageKind = "files"
    lca: LcaMode = "first-parent"
    log_level: int = logging.WARNING

    def __post_init__(self) -> None:
        if self.storage not in STORAGE_KINDS:
            raise ValueError(f"Unknown storage: {self.storage!r}")
        if self.lca not in LCA_MODES:
            raise ValueError(f"Unknown LCA mode: {self.lca!r}")
        if not self.repo_dir or "/" in self.repo_dir or self.repo_dir in (".", ".."):
            raise ValueError(f"Invalid repository directory name: {self.repo_dir!r}")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """Read settings from ``SNAPVC_*`` environment variables.

        ``SNAPVC_DEBUG`` (any non-empty value) forces debug logging,
        otherwise ``SNAPVC_LOG_LEVEL`` is used.
        """
        if env is None:
            env = environ
        if env.get("SNAPVC_DEBUG"):
            level = logging.DEBUG
        else:
            name = env.get("SNAPVC_LOG_LEVEL", "warning").upper()
            levels = logging.getLevelNamesMapping()
            if name not in levels:
                raise ValueError(f"Unknown log level: {name.lower()!r}")
            level = levels[name]
        return cls(
            repo_dir=env.get("SNAPVC_DIR", DEFAULT_REPO_DIR),
            storage=env.get("SNAPVC_STORAGE", "files"),  # type: ignore[arg-type]
            lca=env.get("SNAPVC_LCA", "first-parent"),  # type: ignore[arg-type]
            log_level=level,
        )
