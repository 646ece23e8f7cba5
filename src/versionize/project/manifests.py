"""Versioned project manifests.

A manifest is any project file that declares a single version field:

- MSBuild project files (``.csproj``, ``.fsproj``, ``.vbproj``, ``.props``)
  with a ``<Version>`` element
- ``pyproject.toml`` with ``[project].version`` or ``[tool.poetry].version``

Reading and writing use targeted regex replacement rather than full XML or
TOML rewriting, so formatting and comments are preserved.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from versionize.core.version import Version
from versionize.exceptions import (
    InconsistentVersionsError,
    InvalidVersionError,
    ManifestError,
    NoManifestsFoundError,
    VersionNotFoundError,
)
from versionize.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence
    from pathlib import Path

log = get_logger(__name__)

MSBUILD_SUFFIXES = frozenset({".csproj", ".fsproj", ".vbproj", ".props"})

_MSBUILD_VERSION = re.compile(r"(<Version>\s*)([^<\s]+)(\s*</Version>)")

# [project] or [tool.poetry] table, up to the next table header or EOF
_PYPROJECT_TABLES = (
    re.compile(r"^\[project\][^\n]*\n.*?(?=^\[|\Z)", re.MULTILINE | re.DOTALL),
    re.compile(r"^\[tool\.poetry\][^\n]*\n.*?(?=^\[|\Z)", re.MULTILINE | re.DOTALL),
)
_PYPROJECT_VERSION = re.compile(r'^(version\s*=\s*)["\']([^"\']+)["\']', re.MULTILINE)


@dataclass(frozen=True, slots=True)
class Manifest:
    """A project file and the version it declares."""

    path: Path
    version: Version


class ManifestSet:
    """An ordered collection of manifests from one working copy."""

    def __init__(self, root: Path, manifests: Sequence[Manifest]) -> None:
        self.root = root
        self._manifests = list(manifests)

    def __iter__(self) -> Iterator[Manifest]:
        return iter(self._manifests)

    def __len__(self) -> int:
        return len(self._manifests)

    @property
    def paths(self) -> list[Path]:
        return [m.path for m in self._manifests]

    @property
    def is_empty(self) -> bool:
        return not self._manifests

    @property
    def is_consistent(self) -> bool:
        return len({m.version for m in self._manifests}) <= 1

    @property
    def version(self) -> Version:
        """The single version shared by all manifests.

        Raises:
            NoManifestsFoundError: If there are no manifests
            InconsistentVersionsError: If manifests declare different versions
        """
        if self.is_empty:
            raise NoManifestsFoundError(
                f"Could not find any projects files in {self.root} that have a version defined."
            )
        if not self.is_consistent:
            raise InconsistentVersionsError(
                f"Some projects in {self.root} have an inconsistent version defined. "
                "Please update all versions to be consistent."
            )
        return self._manifests[0].version


def _pyproject_version_span(content: str) -> tuple[int, int] | None:
    """Character span of the version value in ``[project]`` or ``[tool.poetry]``."""
    for table in _PYPROJECT_TABLES:
        section = table.search(content)
        if not section:
            continue
        match = _PYPROJECT_VERSION.search(section.group(0))
        if match:
            start = section.start() + match.start(2)
            return start, start + len(match.group(2))
    return None


def _version_span(path: Path, content: str) -> tuple[int, int] | None:
    if path.suffix in MSBUILD_SUFFIXES:
        match = _MSBUILD_VERSION.search(content)
        return match.span(2) if match else None
    if path.name == "pyproject.toml":
        return _pyproject_version_span(content)
    return None


def read_version(path: Path) -> Version:
    """Read the version declared in ``path``.

    Raises:
        ManifestError: If the file cannot be read or its version is not ``X.Y.Z``
        VersionNotFoundError: If the file declares no version
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Could not read {path}: {e}") from e

    span = _version_span(path, content)
    if span is None:
        raise VersionNotFoundError(f"Could not find a version in {path}")

    raw = content[span[0] : span[1]]
    try:
        return Version.parse(raw)
    except InvalidVersionError as e:
        raise ManifestError(f"{path} declares an unsupported version {raw!r}") from e


def write_version(manifest: Manifest, version: Version) -> Manifest:
    """Rewrite the version in ``manifest`` in place.

    Returns:
        The manifest with its new version

    Raises:
        ManifestError: If the file cannot be read or written
        VersionNotFoundError: If the version field disappeared since discovery
    """
    path = manifest.path
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Could not read {path}: {e}") from e

    span = _version_span(path, content)
    if span is None:
        raise VersionNotFoundError(f"Could not find version to update in {path}")

    start, end = span
    try:
        path.write_text(content[:start] + str(version) + content[end:], encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Could not write {path}: {e}") from e
    log.debug("updated manifest", path=str(path), version=str(version))
    return Manifest(path=path, version=version)


def _candidates(root: Path, patterns: Iterable[str], exclude_dirs: Iterable[str]) -> list[Path]:
    excluded = set(exclude_dirs)
    found: set[Path] = set()
    for pattern in patterns:
        for path in root.glob(pattern):
            relative = path.relative_to(root)
            if any(part in excluded for part in relative.parts[:-1]):
                continue
            if path.is_file():
                found.add(path)
    return sorted(found)


def discover_manifests(
    root: Path,
    patterns: Iterable[str],
    exclude_dirs: Iterable[str] = (".git",),
) -> ManifestSet:
    """Find every manifest under ``root`` that declares a version.

    Files matching ``patterns`` without a version field are skipped; files
    whose version is not a plain semantic version are an error.
    """
    manifests = []
    for path in _candidates(root, patterns, exclude_dirs):
        try:
            version = read_version(path)
        except VersionNotFoundError:
            log.debug("skipping file without version", path=str(path))
            continue
        manifests.append(Manifest(path=path, version=version))

    log.debug("discovered manifests", count=len(manifests))
    return ManifestSet(root, manifests)
