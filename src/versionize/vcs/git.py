"""Git repository access.

All operations shell out to the ``git`` executable. Reads (history, tags,
status) and writes (stage, commit, tag) are issued one at a time against the
working-copy root; nothing is cached between calls.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from versionize.exceptions import GitError, NoWorkingCopyError
from versionize.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

log = get_logger(__name__)

# Separators that cannot appear in commit metadata
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"

_LOG_FORMAT = _FIELD_SEP.join(["%H", "%P", "%an", "%ae", "%aI", "%B"]) + _RECORD_SEP


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit as read from the history."""

    sha: str
    message: str
    author_name: str
    author_email: str
    date: datetime
    parents: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Tag:
    """A tag and the commit it points to (annotated tags are dereferenced)."""

    name: str
    sha: str


def discover_working_copy(start: Path) -> Path:
    """Find the git working-copy root at or above ``start``.

    Args:
        start: Directory to start the upward search from

    Returns:
        The nearest directory containing a ``.git`` entry

    Raises:
        NoWorkingCopyError: If ``start`` does not exist or no ancestor is a
            working copy
    """
    start = start.resolve()
    if not start.is_dir():
        raise NoWorkingCopyError(
            f"Directory {start} or any parent directory do not contain a git working copy"
        )

    for directory in (start, *start.parents):
        if (directory / ".git").exists():
            log.debug("discovered working copy", root=str(directory))
            return directory

    raise NoWorkingCopyError(
        f"Directory {start} or any parent directory do not contain a git working copy"
    )


class GitRepository:
    """A git working copy rooted at ``path``."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def __repr__(self) -> str:
        return f"GitRepository({str(self.path)!r})"

    def _git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        log.debug("git", args=list(args))
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.path,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e

        if check and result.returncode != 0:
            raise GitError(
                f"'git {' '.join(args)}' failed with exit code {result.returncode}",
                stderr=result.stderr,
            )
        return result

    def has_head(self) -> bool:
        """Whether the repository has at least one commit."""
        return self._git("rev-parse", "--verify", "--quiet", "HEAD", check=False).returncode == 0

    def head_sha(self) -> str:
        return self._git("rev-parse", "HEAD").stdout.strip()

    def head_commits(self) -> list[Commit]:
        """Return every commit reachable from HEAD, newest first.

        Commits are listed in topological order, so a commit always comes
        before its parents. An empty repository has no commits.
        """
        if not self.has_head():
            return []

        output = self._git("log", "--topo-order", f"--format={_LOG_FORMAT}", "HEAD").stdout
        commits = []
        for record in output.split(_RECORD_SEP):
            record = record.strip("\n")
            if not record:
                continue
            sha, parents, name, email, date, message = record.split(_FIELD_SEP, 5)
            commits.append(
                Commit(
                    sha=sha,
                    message=message.strip(),
                    author_name=name,
                    author_email=email,
                    date=datetime.fromisoformat(date),
                    parents=tuple(parents.split()),
                )
            )
        return commits

    def tags(self) -> list[Tag]:
        """Return all tags with the commit each one points to."""
        output = self._git(
            "for-each-ref",
            "refs/tags",
            f"--format=%(refname:short){_FIELD_SEP}%(objectname){_FIELD_SEP}%(*objectname)",
        ).stdout

        tags = []
        for line in output.splitlines():
            if not line.strip():
                continue
            name, object_sha, peeled_sha = line.split(_FIELD_SEP)
            tags.append(Tag(name=name, sha=peeled_sha or object_sha))
        return tags

    def is_dirty(self) -> bool:
        """Whether the working copy has staged, unstaged or untracked changes."""
        return bool(self._git("status", "--porcelain").stdout.strip())

    def stage(self, paths: Iterable[Path]) -> None:
        """Stage exactly ``paths``."""
        relative = self._relative(paths)
        if relative:
            self._git("add", "--", *relative)

    def _relative(self, paths: Iterable[Path]) -> list[str]:
        root = self.path.resolve()
        return [str(Path(p).resolve().relative_to(root)) for p in paths]

    def commit(
        self,
        message: str,
        author: tuple[str, str] | None = None,
        paths: Iterable[Path] | None = None,
    ) -> str:
        """Commit and return the new commit's sha.

        Args:
            message: Commit message
            author: Optional ``(name, email)``; defaults to the git config identity
            paths: Commit only these tracked paths, leaving anything else in the
                index staged; the whole index when omitted
        """
        args: list[str] = []
        if author is not None:
            name, email = author
            args += ["-c", f"user.name={name}", "-c", f"user.email={email}"]
        only = [] if paths is None else ["--", *self._relative(paths)]
        self._git(*args, "commit", "--no-verify", "-m", message, *only)
        return self.head_sha()

    def tag(self, name: str, sha: str, message: str | None = None) -> None:
        """Create a tag ``name`` at ``sha``; annotated when ``message`` is given."""
        if message is None:
            self._git("tag", name, sha)
        else:
            self._git("tag", "-a", name, "-m", message, sha)
