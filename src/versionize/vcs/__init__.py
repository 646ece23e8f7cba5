"""Version control access."""

from __future__ import annotations

from versionize.vcs.git import Commit, GitRepository, Tag, discover_working_copy

__all__ = [
    "Commit",
    "GitRepository",
    "Tag",
    "discover_working_copy",
]
