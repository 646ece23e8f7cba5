"""Implementation of the release command.

Bumps project versions, updates the changelog, commits and tags, driven by
the conventional commits since the last release.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from versionize.config.models import VersionSource
from versionize.core.release import ReleaseOptions, versionize
from versionize.reporter import ConsoleReporter

if TYPE_CHECKING:
    from rich.console import Console

    from versionize.core.release import ReleaseOutcome
    from versionize.core.version import Version
    from versionize.reporter import Reporter


def convert_version_source(value: str | None, reporter: Reporter) -> VersionSource | None:
    """Map a ``--version-source`` value to a :class:`VersionSource`.

    Matching is case-insensitive. An empty value means "not given"; an
    unknown value falls back to ``DEFAULT`` with a warning.
    """
    if value is None or not value.strip():
        return None

    source = VersionSource.lookup(value)
    if source is None:
        reporter.warning("Selected version source is not supported. Default value will be used")
        return VersionSource.DEFAULT
    return source


def run_release(
    path: str | None,
    *,
    dry_run: bool,
    skip_dirty: bool,
    skip_commit: bool,
    release_as: Version | None,
    version_source: str | None,
    ignore_insignificant: bool,
    changelog_all: bool,
    silent: bool,
    console: Console,
    err_console: Console,
) -> ReleaseOutcome:
    """Run the release command.

    Args:
        path: Optional directory inside the working copy; defaults to the cwd
        dry_run: Report the plan without changing anything
        skip_dirty: Do not refuse to run on a dirty working copy
        skip_commit: Update files but do not commit or tag
        release_as: Manual version override
        version_source: Name of the authoritative version source
        ignore_insignificant: Stop when no commit justifies a bump
        changelog_all: Include commits of every type in the changelog
        silent: Suppress all output
        console: Console for standard output
        err_console: Console for warnings

    Returns:
        How the release ended; its exit code is the process exit code
    """
    reporter = ConsoleReporter(console, err_console, silent=silent)
    start_dir = Path(path) if path else Path.cwd()

    options = ReleaseOptions(
        dry_run=dry_run,
        skip_dirty=skip_dirty,
        skip_commit=skip_commit,
        release_as=release_as,
        version_source=convert_version_source(version_source, reporter),
        ignore_insignificant=ignore_insignificant,
        # The flag can only turn the Other section on; config decides otherwise
        changelog_all=True if changelog_all else None,
    )
    return versionize(start_dir, reporter, options)
