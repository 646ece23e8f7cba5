"""Changelog generation.

Renders a changelog section for a resolved release plan and inserts it into
the existing changelog file. Rendering is pure: the same plan (and date)
always yields the same text.

Section order is fixed::

    Features          feat commits (non-breaking)
    Bug Fixes         fix and perf commits (non-breaking)
    BREAKING CHANGES  every breaking commit, whatever its type
    Other             everything else, only when all commits are included

Sections without entries are omitted.
"""

from __future__ import annotations

import re
from datetime import date
from typing import TYPE_CHECKING

from versionize.config.models import CommitsConfig
from versionize.exceptions import ChangelogError
from versionize.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from versionize.core.commits import ParsedCommit
    from versionize.core.resolver import ReleasePlan

log = get_logger(__name__)

# First existing release heading; new sections are inserted right before it
_RELEASE_HEADING = re.compile(r"^(?:<a name=|##\s)", re.MULTILINE)


def _sections(
    config: CommitsConfig,
) -> list[tuple[str, Callable[[ParsedCommit], bool], bool]]:
    """(title, predicate, only-with-include-all) for each section, in order."""
    return [
        ("Features", lambda c: not c.is_breaking and c.commit_type in config.types_minor, False),
        ("Bug Fixes", lambda c: not c.is_breaking and c.commit_type in config.types_patch, False),
        ("BREAKING CHANGES", lambda c: c.is_breaking, False),
        (
            "Other",
            lambda c: (
                not c.is_breaking
                and c.commit_type not in config.types_minor
                and c.commit_type not in config.types_patch
            ),
            True,
        ),
    ]


def format_commit_for_changelog(commit: ParsedCommit) -> str:
    """Format one changelog entry: ``* **scope:** subject (sha)``."""
    scope = f"**{commit.scope}:** " if commit.scope else ""
    description = commit.description.splitlines()[0] if commit.description else ""
    sha = f" ({commit.short_sha})" if commit.sha else ""
    return f"* {scope}{description}{sha}"


def render(
    plan: ReleasePlan,
    include_all: bool = False,
    *,
    today: date | None = None,
    config: CommitsConfig | None = None,
) -> str:
    """Render the changelog section for ``plan``.

    Args:
        plan: Resolved release plan; its commits are newest first
        include_all: Add an ``Other`` section for commits that do not bump
        today: Release date for the heading; defaults to the current local date
        config: Commit type mapping, to match the one used for resolution

    Returns:
        Markdown text ending with a blank line
    """
    config = config or CommitsConfig()
    release_date = today or date.today()
    version = plan.next_version

    lines = [
        f'<a name="{version}"></a>',
        f"## {version} ({release_date.isoformat()})",
        "",
    ]

    for title, belongs, needs_all in _sections(config):
        if needs_all and not include_all:
            continue
        entries = [format_commit_for_changelog(c) for c in plan.commits if belongs(c)]
        if not entries:
            continue
        lines.append(f"### {title}")
        lines.append("")
        lines.extend(entries)
        lines.append("")

    return "\n".join(lines) + "\n"


def prepend_section(existing: str, section: str, header: str) -> str:
    """Insert ``section`` above the newest release in ``existing``.

    Text before the first release heading (the file's preamble) stays on top;
    everything else is kept byte for byte. An empty changelog gets ``header``
    as its preamble.
    """
    if not existing.strip():
        return f"{header.rstrip()}\n\n{section}"

    match = _RELEASE_HEADING.search(existing)
    if match is None:
        return f"{existing.rstrip()}\n\n{section}"

    return f"{existing[: match.start()]}{section}\n{existing[match.start():]}"


class ChangelogFile:
    """The changelog file of a working copy."""

    def __init__(self, path: Path, header: str) -> None:
        self.path = path
        self.header = header

    def read(self) -> str:
        """Current content; empty when the file does not exist yet.

        Raises:
            ChangelogError: If the file cannot be read as UTF-8
        """
        if not self.path.is_file():
            return ""
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ChangelogError(f"Could not read {self.path}: {e}") from e

    def write(self, section: str) -> Path:
        """Insert ``section`` and write the file back."""
        content = prepend_section(self.read(), section, self.header)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ChangelogError(f"Could not write {self.path}: {e}") from e
        log.debug("updated changelog", path=str(self.path))
        return self.path
