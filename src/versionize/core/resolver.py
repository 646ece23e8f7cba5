"""Next-version resolution.

Three sources can disagree about the current version: the latest release tag,
the version declared in the project manifests, and the commit log. The
resolver picks a baseline according to the :class:`VersionSource`, selects the
commits made since that baseline, classifies them and derives the next
version.

Each version source is one baseline strategy in :data:`BASELINE_STRATEGIES`:

=========  ======================  ===========================================
Source     Baseline                Commit range
=========  ======================  ===========================================
csproj     manifest version        since the tag matching the manifest version,
                                   full history if there is none
gittag     latest release tag      since that tag, full history if untagged
default    max(manifest, tag)      follows whichever produced the maximum;
                                   the tag wins a tie
=========  ======================  ===========================================

A plan never moves the manifests to a lower version. When the baseline bumped
by the commits stays below the manifest version (a gittag source with no or an
older tag), the release is treated as not affected by the commits.

Expected stops are returned as :class:`ResolutionStop` values rather than
raised. Fatal conditions (no manifests, inconsistent manifests) raise.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from versionize.config.models import VersionSource
from versionize.core.commits import calculate_bump, dedupe_commits, parse_commits
from versionize.core.version import BumpType, Version
from versionize.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from versionize.config.models import CommitsConfig
    from versionize.core.commits import ParsedCommit
    from versionize.project.manifests import ManifestSet
    from versionize.vcs.git import Commit, Tag

log = get_logger(__name__)


class RepositoryReader(Protocol):
    """Read access to a repository's history and tags."""

    def head_commits(self) -> Sequence[Commit]: ...

    def tags(self) -> Iterable[Tag]: ...


class StopReason(StrEnum):
    """Expected, non-error reasons to stop before releasing."""

    NO_SIGNIFICANT_CHANGE = "no-significant-change"
    ALREADY_TAGGED = "already-tagged"


@dataclass(frozen=True, slots=True)
class ResolutionStop:
    """Resolution ended without a release to apply."""

    reason: StopReason
    version: Version
    message: str


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    """The resolved release, prior to any mutation.

    Attributes:
        previous_version: Baseline the next version was derived from; the manifest
            version when nothing changes
        next_version: Version to release
        bump: Severity justifying the change (a label only for manual overrides)
        commits: Classified commits in the range, newest first
        changelog_section: Rendered changelog text, filled in after composing
    """

    previous_version: Version
    next_version: Version
    bump: BumpType
    commits: tuple[ParsedCommit, ...]
    changelog_section: str = ""

    @property
    def is_noop(self) -> bool:
        """Nothing would change: the next version equals the baseline."""
        return self.next_version == self.previous_version


@dataclass(frozen=True, slots=True)
class ReleaseTag:
    """A tag named ``<prefix><major>.<minor>.<patch>``."""

    name: str
    sha: str
    version: Version


@dataclass(frozen=True, slots=True)
class VersionSources:
    """Everything a baseline strategy may consult."""

    manifest_version: Version
    latest_tag: ReleaseTag | None
    reachable_tags: tuple[ReleaseTag, ...]

    def tag_for(self, version: Version) -> ReleaseTag | None:
        return next((t for t in self.reachable_tags if t.version == version), None)


@dataclass(frozen=True, slots=True)
class Baseline:
    """Current version and the tag the commit range starts after."""

    version: Version
    anchor: ReleaseTag | None


def release_tags(tags: Iterable[Tag], prefix: str = "v") -> list[ReleaseTag]:
    """Keep only tags named ``<prefix>X.Y.Z``."""
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)\.(\d+)\.(\d+)$")
    result = []
    for tag in tags:
        match = pattern.match(tag.name)
        if match:
            major, minor, patch = (int(g) for g in match.groups())
            result.append(ReleaseTag(tag.name, tag.sha, Version(major, minor, patch)))
    return result


def manifest_baseline(sources: VersionSources) -> Baseline:
    return Baseline(sources.manifest_version, sources.tag_for(sources.manifest_version))


def tag_baseline(sources: VersionSources) -> Baseline:
    tag = sources.latest_tag
    return Baseline(tag.version if tag else Version.ZERO, tag)


def default_baseline(sources: VersionSources) -> Baseline:
    tag_version = sources.latest_tag.version if sources.latest_tag else Version.ZERO
    if tag_version >= sources.manifest_version:
        return tag_baseline(sources)
    return manifest_baseline(sources)


BASELINE_STRATEGIES: dict[VersionSource, Callable[[VersionSources], Baseline]] = {
    VersionSource.CSPROJ: manifest_baseline,
    VersionSource.GITTAG: tag_baseline,
    VersionSource.DEFAULT: default_baseline,
}


def commits_since(history: Sequence[Commit], anchor_sha: str | None) -> list[Commit]:
    """Commits in ``history`` that are not the anchor or one of its ancestors.

    ``history`` must contain every commit reachable from HEAD with parent
    links. With no anchor the whole history is returned. Order is preserved
    and repeated commits are dropped.
    """
    history = dedupe_commits(history)
    if anchor_sha is None:
        return history

    by_sha = {c.sha: c for c in history}
    excluded: set[str] = set()
    pending = [anchor_sha]
    while pending:
        sha = pending.pop()
        if sha in excluded:
            continue
        excluded.add(sha)
        commit = by_sha.get(sha)
        if commit is not None:
            pending.extend(commit.parents)

    return [c for c in history if c.sha not in excluded]


def resolve(
    repo: RepositoryReader,
    manifests: ManifestSet,
    source: VersionSource = VersionSource.DEFAULT,
    explicit_version: Version | None = None,
    *,
    ignore_insignificant: bool = False,
    tag_prefix: str = "v",
    commits_config: CommitsConfig | None = None,
) -> ReleasePlan | ResolutionStop:
    """Compute the release plan for the working copy.

    Args:
        repo: History and tag reader
        manifests: Discovered project manifests
        source: Which baseline is authoritative
        explicit_version: Manual override; always wins when given
        ignore_insignificant: Stop instead of producing a no-op plan when no
            commit justifies a bump
        tag_prefix: Prefix of release tag names
        commits_config: Commit type to bump mapping

    Returns:
        The plan, or a stop when there is nothing significant to release or
        the next version has already been tagged

    Raises:
        NoManifestsFoundError: If no manifest declares a version
        InconsistentVersionsError: If manifests disagree
    """
    manifest_version = manifests.version

    history = dedupe_commits(repo.head_commits())
    reachable_shas = {c.sha for c in history}
    all_tags = release_tags(repo.tags(), tag_prefix)
    reachable = tuple(t for t in all_tags if t.sha in reachable_shas)
    latest = max(reachable, key=lambda t: t.version, default=None)

    sources = VersionSources(manifest_version, latest, reachable)
    baseline = BASELINE_STRATEGIES[source](sources)
    anchor_sha = baseline.anchor.sha if baseline.anchor else None
    commits = tuple(parse_commits(commits_since(history, anchor_sha), commits_config))

    log.debug(
        "resolved baseline",
        source=str(source),
        manifest_version=str(manifest_version),
        latest_tag=latest.name if latest else None,
        baseline=str(baseline.version),
        anchor=baseline.anchor.name if baseline.anchor else None,
        commits=len(commits),
    )

    if explicit_version is not None:
        return ReleasePlan(
            previous_version=baseline.version,
            next_version=explicit_version,
            bump=BumpType.between(baseline.version, explicit_version),
            commits=commits,
        )

    bump = calculate_bump(commits)
    next_version = baseline.version.bump(bump)
    if bump != BumpType.NONE and next_version < manifest_version:
        # Never move the manifests backwards
        log.info(
            "next version below manifest version",
            next_version=str(next_version),
            manifest_version=str(manifest_version),
        )
        bump = BumpType.NONE

    if bump == BumpType.NONE:
        if ignore_insignificant:
            return ResolutionStop(
                StopReason.NO_SIGNIFICANT_CHANGE,
                manifest_version,
                f"Version was not affected by commits since last release ({manifest_version}), "
                "since you specified to ignore insignificant changes, "
                "no action will be performed.",
            )
        return ReleasePlan(manifest_version, manifest_version, BumpType.NONE, commits)

    if any(t.version == next_version for t in all_tags):
        return ResolutionStop(
            StopReason.ALREADY_TAGGED,
            next_version,
            f"The next version {next_version} has been tagged already.",
        )

    return ReleasePlan(baseline.version, next_version, bump, commits)
