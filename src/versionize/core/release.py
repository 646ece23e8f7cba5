"""Release orchestration.

:class:`Versionizer` drives one release through a fixed sequence of states::

    DISCOVERING → VALIDATING → RESOLVING → COMPOSING → APPLYING
                → COMMITTING → TAGGING → DONE

``ABORTED`` is reachable from every state. Each run returns a
:class:`ReleaseOutcome` instead of raising: ``APPLIED`` when files were
changed, ``NOOP`` for dry runs and expected stops, ``FATAL`` for errors the
user has to fix. Every abort reports exactly one message.

There is no rollback. If a git write fails after the manifests and changelog
were rewritten, the working copy is left dirty and the next run refuses to
proceed until it is cleaned up.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from versionize.config.loader import load_config
from versionize.config.models import VersionizeConfig, VersionSource
from versionize.core.changelog import ChangelogFile, render
from versionize.core.resolver import ReleasePlan, ResolutionStop, StopReason, resolve
from versionize.exceptions import DirtyWorkingCopyError, ErrorKind, VersionizeError
from versionize.logging import get_logger
from versionize.project.manifests import ManifestSet, discover_manifests, write_version
from versionize.vcs.git import GitRepository, discover_working_copy

if TYPE_CHECKING:
    from datetime import date
    from pathlib import Path

    from versionize.core.version import Version
    from versionize.reporter import Reporter

log = get_logger(__name__)


class ReleaseState(StrEnum):
    DISCOVERING = "discovering"
    VALIDATING = "validating"
    RESOLVING = "resolving"
    COMPOSING = "composing"
    APPLYING = "applying"
    COMMITTING = "committing"
    TAGGING = "tagging"
    DONE = "done"
    ABORTED = "aborted"


class OutcomeStatus(StrEnum):
    APPLIED = "applied"
    NOOP = "noop"
    FATAL = "fatal"


@dataclass(frozen=True, slots=True)
class ReleaseOptions:
    """Per-run switches, usually taken from the command line.

    ``version_source`` and ``changelog_all`` fall back to the configuration
    when left as ``None``.
    """

    dry_run: bool = False
    skip_dirty: bool = False
    skip_commit: bool = False
    release_as: Version | None = None
    version_source: VersionSource | None = None
    ignore_insignificant: bool = False
    changelog_all: bool | None = None


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    """Result of a run.

    Attributes:
        status: What happened overall
        version: Released (or would-be) version, when one was resolved
        plan: The resolved plan, when resolution got that far
        kind: Error kind for ``FATAL``, stop reason for expected stops
        message: The message reported for stops and failures
    """

    status: OutcomeStatus
    version: Version | None = None
    plan: ReleasePlan | None = None
    kind: ErrorKind | StopReason | None = None
    message: str | None = None

    @property
    def exit_code(self) -> int:
        return 1 if self.status == OutcomeStatus.FATAL else 0

    @classmethod
    def fatal(cls, error: VersionizeError) -> ReleaseOutcome:
        return cls(OutcomeStatus.FATAL, kind=error.kind, message=str(error))


class Versionizer:
    """Runs releases for one working copy.

    Args:
        repo: Repository at the working-copy root
        reporter: Receives user-facing messages
        config: Release configuration
        today: Release date for changelog headings; defaults to the current date
    """

    def __init__(
        self,
        repo: GitRepository,
        reporter: Reporter,
        config: VersionizeConfig | None = None,
        *,
        today: date | None = None,
    ) -> None:
        self.repo = repo
        self.reporter = reporter
        self.config = config or VersionizeConfig()
        self.today = today
        self.state = ReleaseState.DISCOVERING

    @property
    def root(self) -> Path:
        return self.repo.path

    def _enter(self, state: ReleaseState) -> None:
        log.debug("release state", previous=str(self.state), state=str(state))
        self.state = state

    def _relative(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.root))
        except ValueError:
            return str(path)

    def run(self, options: ReleaseOptions | None = None) -> ReleaseOutcome:
        """Run one release and report how it ended."""
        options = options or ReleaseOptions()
        try:
            return self._run(options)
        except VersionizeError as e:
            self._enter(ReleaseState.ABORTED)
            log.debug("release aborted", kind=str(e.kind), error=str(e))
            self.reporter.message(str(e))
            return ReleaseOutcome.fatal(e)

    def _run(self, options: ReleaseOptions) -> ReleaseOutcome:
        self._enter(ReleaseState.VALIDATING)
        manifests = self._validate(options)

        self._enter(ReleaseState.RESOLVING)
        source = options.version_source or self.config.version_source
        resolution = resolve(
            self.repo,
            manifests,
            source,
            options.release_as,
            ignore_insignificant=options.ignore_insignificant,
            tag_prefix=self.config.tag_prefix,
            commits_config=self.config.commits,
        )
        if isinstance(resolution, ResolutionStop):
            self._enter(ReleaseState.ABORTED)
            self.reporter.message(resolution.message)
            return ReleaseOutcome(
                OutcomeStatus.NOOP,
                version=resolution.version,
                kind=resolution.reason,
                message=resolution.message,
            )

        plan = resolution
        if plan.is_noop and options.release_as is None:
            self._enter(ReleaseState.DONE)
            self.reporter.message(
                f"Version was not affected by commits since last release ({plan.next_version})"
            )
            return ReleaseOutcome(OutcomeStatus.NOOP, version=plan.next_version, plan=plan)

        self._enter(ReleaseState.COMPOSING)
        include_all = (
            options.changelog_all
            if options.changelog_all is not None
            else self.config.changelog.include_all
        )
        section = render(plan, include_all, today=self.today, config=self.config.commits)
        plan = dataclasses.replace(plan, changelog_section=section)

        self._enter(ReleaseState.APPLYING)
        self.reporter.message(
            f"Bumping version from {plan.previous_version} to {plan.next_version} in projects"
        )
        changelog = ChangelogFile(
            self.root / self.config.changelog_path, self.config.changelog.header
        )

        if options.dry_run:
            self._enter(ReleaseState.DONE)
            for line in plan.changelog_section.rstrip().splitlines():
                self.reporter.message(line)
            self.reporter.message(
                f"Dry run: {self._relative(changelog.path)} and "
                f"{len(manifests)} project file(s) left unchanged"
            )
            return ReleaseOutcome(OutcomeStatus.NOOP, version=plan.next_version, plan=plan)

        for manifest in manifests:
            write_version(manifest, plan.next_version)
        changelog.write(plan.changelog_section)
        self.reporter.message(f"Updated {self._relative(changelog.path)}")

        if not options.skip_commit:
            self._enter(ReleaseState.COMMITTING)
            release_files = [*manifests.paths, changelog.path]
            self.repo.stage(release_files)
            sha = self.repo.commit(
                self.config.git.commit_message.format(version=plan.next_version),
                author=self._author(),
                paths=release_files,
            )
            self.reporter.message(
                f"Committed changes in projects and {self._relative(changelog.path)}"
            )

            self._enter(ReleaseState.TAGGING)
            tag_name = self.config.tag_name(plan.next_version)
            self.repo.tag(
                tag_name,
                sha,
                self.config.git.tag_message.format(version=plan.next_version),
            )
            self.reporter.message(f"Tagged release as {tag_name}")

        self._enter(ReleaseState.DONE)
        self.reporter.message(f"Released version {plan.next_version}")
        return ReleaseOutcome(OutcomeStatus.APPLIED, version=plan.next_version, plan=plan)

    def _validate(self, options: ReleaseOptions) -> ManifestSet:
        if not (options.skip_dirty or self.config.allow_dirty) and self.repo.is_dirty():
            raise DirtyWorkingCopyError(
                f"Repository {self.root} is dirty. Please commit your changes."
            )

        manifests = discover_manifests(
            self.root,
            self.config.manifests.patterns,
            self.config.manifests.exclude_dirs,
        )
        # Raises for empty or inconsistent manifests before anything is touched
        current = manifests.version
        log.debug("manifest version", version=str(current), count=len(manifests))

        self.reporter.message(f"Discovered {len(manifests)} versionable projects")
        for manifest in manifests:
            self.reporter.message(f"  * {self._relative(manifest.path)}")
        return manifests

    def _author(self) -> tuple[str, str] | None:
        git = self.config.git
        if git.author_name and git.author_email:
            return git.author_name, git.author_email
        return None


def versionize(
    start_dir: Path,
    reporter: Reporter,
    options: ReleaseOptions | None = None,
    config: VersionizeConfig | None = None,
    *,
    today: date | None = None,
) -> ReleaseOutcome:
    """Discover the working copy containing ``start_dir`` and release it.

    Configuration is loaded from the working copy unless ``config`` is given.
    """
    try:
        root = discover_working_copy(start_dir)
        if config is None:
            config = load_config(root)
    except VersionizeError as e:
        log.debug("release aborted", state=str(ReleaseState.DISCOVERING), kind=str(e.kind))
        reporter.message(str(e))
        return ReleaseOutcome.fatal(e)

    return Versionizer(GitRepository(root), reporter, config, today=today).run(options)
