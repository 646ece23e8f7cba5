"""Command-line entry point."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from versionize import __version__
from versionize.cli.commands.release import run_release
from versionize.core.version import Version
from versionize.exceptions import InvalidVersionError
from versionize.logging import configure_logging

app = typer.Typer(
    name="versionize",
    help="Automatic versioning and CHANGELOG generation, using conventional commit messages.",
    add_completion=False,
    no_args_is_help=False,
)

console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"versionize {__version__}", markup=False, highlight=False)
        raise typer.Exit()


def _parse_release_version(value: str | None) -> Version | None:
    if value is None:
        return None
    try:
        return Version.parse(value)
    except InvalidVersionError as e:
        raise typer.BadParameter(str(e)) from e


@app.command()
def release(
    working_dir: Annotated[
        str | None,
        typer.Option(
            "-w",
            "--workingDir",
            "--working-dir",
            help="Directory containing projects to version.",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "-d",
            "--dry-run",
            help="Skip changing versions in projects, changelog generation and git commit.",
        ),
    ] = False,
    skip_dirty: Annotated[
        bool, typer.Option("--skip-dirty", help="Skip git dirty check.")
    ] = False,
    release_as: Annotated[
        str | None,
        typer.Option("-r", "--release-as", help="Specify the release version manually."),
    ] = None,
    silent: Annotated[
        bool, typer.Option("--silent", help="Suppress output to console.")
    ] = False,
    version_source: Annotated[
        str | None,
        typer.Option(
            "--version-source",
            help="Source of the version: Default, GitTag or Csproj (case insensitive).",
        ),
    ] = None,
    skip_commit: Annotated[
        bool,
        typer.Option(
            "--skip-commit",
            help="Skip commit and git tag after updating changelog and incrementing the version.",
        ),
    ] = False,
    ignore_insignificant: Annotated[
        bool,
        typer.Option(
            "-i",
            "--ignore-insignificant-commits",
            help="Do not bump the version if no significant commits (fix, feat or BREAKING) "
            "are found.",
        ),
    ] = False,
    changelog_all: Annotated[
        bool,
        typer.Option(
            "--changelog-all",
            help="Include all commits in the changelog, not just fix, feat and breaking changes.",
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Print diagnostic logs to stderr.")
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "-v",
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    """Bump versions, update the changelog, commit and tag a release."""
    configure_logging(verbose=verbose)

    outcome = run_release(
        working_dir,
        dry_run=dry_run,
        skip_dirty=skip_dirty,
        skip_commit=skip_commit,
        release_as=_parse_release_version(release_as),
        version_source=version_source,
        ignore_insignificant=ignore_insignificant,
        changelog_all=changelog_all,
        silent=silent,
        console=console,
        err_console=err_console,
    )
    raise typer.Exit(outcome.exit_code)


def main() -> None:
    app()
