"""Conventional commit parsing.

This module parses commit messages following the Conventional Commits
specification (https://www.conventionalcommits.org/) and assigns each one
the version bump it justifies.

Format: <type>(<scope>)!: <description>

Examples:
    feat: add new feature
    fix(parser): handle edge case
    feat!: breaking change
    feat(api)!: another breaking change

A message that does not follow the format is kept as a commit with an empty
type; it never triggers a bump and never aborts processing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from versionize.config.models import CommitsConfig
from versionize.core.version import BumpType

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from versionize.vcs.git import Commit

# Pattern for the header line: type(scope)!: description
COMMIT_PATTERN = re.compile(
    r"^(?P<type>[A-Za-z][\w-]*)"  # type (e.g. feat, fix, chore)
    r"(?:\((?P<scope>[^()\r\n]*)\))?"  # optional scope
    r"(?P<breaking>!)?"  # optional breaking marker
    r":\s+(?P<description>\S.*)$"  # colon, space, description
)


@dataclass(frozen=True, slots=True)
class ParsedCommit:
    """A commit message classified according to Conventional Commits.

    Attributes:
        sha: Commit hash (may be empty for messages not tied to a commit)
        commit_type: Lower-cased type, ``""`` for non-conventional messages
        scope: Optional scope from the header
        is_breaking: ``!`` in the header or a breaking-change footer in the body
        description: Header subject; the full message for non-conventional commits
        body: Message text after the header, if any
        bump: Version bump this commit justifies
    """

    sha: str
    commit_type: str
    scope: str | None
    is_breaking: bool
    description: str
    body: str | None
    bump: BumpType

    @property
    def is_conventional(self) -> bool:
        return self.commit_type != ""

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


def classify(
    message: str,
    sha: str = "",
    config: CommitsConfig | None = None,
) -> ParsedCommit:
    """Classify a raw commit message.

    Args:
        message: Full commit message (header, optional body and footers)
        sha: Hash of the commit the message belongs to
        config: Type-to-bump mapping; defaults to ``feat`` → minor,
            ``fix``/``perf`` → patch

    Returns:
        The parsed commit. Never raises for malformed input.
    """
    config = config or CommitsConfig()
    header, _, rest = message.strip().partition("\n")
    body = rest.strip() or None

    match = COMMIT_PATTERN.match(header.strip())
    if not match:
        return ParsedCommit(
            sha=sha,
            commit_type="",
            scope=None,
            is_breaking=False,
            description=message.strip(),
            body=None,
            bump=BumpType.NONE,
        )

    commit_type = match["type"].lower()
    scope = (match["scope"] or "").strip() or None
    is_breaking = bool(match["breaking"]) or bool(
        body and re.search(config.breaking_pattern, body)
    )

    return ParsedCommit(
        sha=sha,
        commit_type=commit_type,
        scope=scope,
        is_breaking=is_breaking,
        description=match["description"].strip(),
        body=body,
        bump=_bump_for(commit_type, is_breaking, config),
    )


def _bump_for(commit_type: str, is_breaking: bool, config: CommitsConfig) -> BumpType:
    if is_breaking:
        return BumpType.MAJOR
    if commit_type in config.types_minor:
        return BumpType.MINOR
    if commit_type in config.types_patch:
        return BumpType.PATCH
    return BumpType.NONE


def dedupe_commits(commits: Iterable[Commit]) -> list[Commit]:
    """Drop repeated commits, keeping the first occurrence of each sha."""
    seen: set[str] = set()
    unique: list[Commit] = []
    for commit in commits:
        if commit.sha in seen:
            continue
        seen.add(commit.sha)
        unique.append(commit)
    return unique


def parse_commits(
    commits: Sequence[Commit],
    config: CommitsConfig | None = None,
) -> list[ParsedCommit]:
    """Classify a sequence of commits, preserving order."""
    return [classify(commit.message, commit.sha, config) for commit in commits]


def calculate_bump(commits: Iterable[ParsedCommit]) -> BumpType:
    """Return the largest bump justified by ``commits`` (``NONE`` if empty)."""
    return BumpType.combine(*(pc.bump for pc in commits))
