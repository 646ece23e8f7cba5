"""Exception hierarchy for versionize.

Every fatal condition is a subclass of :class:`VersionizeError` and carries an
:class:`ErrorKind`, which the release orchestrator uses to build its outcome.
Expected stops (nothing significant to release, version already tagged) are
not exceptions; see :mod:`versionize.core.resolver`.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of fatal failures."""

    CONFIG = "config"
    NO_WORKING_COPY = "no-working-copy"
    DIRTY_WORKING_COPY = "dirty-working-copy"
    NO_MANIFESTS_FOUND = "no-manifests-found"
    INCONSISTENT_VERSIONS = "inconsistent-versions"
    INVALID_VERSION = "invalid-version"
    MANIFEST = "manifest"
    CHANGELOG = "changelog"
    GIT = "git"


class VersionizeError(Exception):
    """Base exception for all versionize errors."""

    kind: ErrorKind = ErrorKind.CONFIG


# Configuration


class ConfigError(VersionizeError):
    """Configuration could not be read."""

    kind = ErrorKind.CONFIG


class ConfigNotFoundError(ConfigError):
    """A configuration file was expected but does not exist."""


class ConfigValidationError(ConfigError):
    """Configuration values failed validation."""


# Working copy


class NoWorkingCopyError(VersionizeError):
    """No git working copy was found upward from the start directory."""

    kind = ErrorKind.NO_WORKING_COPY


class DirtyWorkingCopyError(VersionizeError):
    """The working copy has uncommitted changes."""

    kind = ErrorKind.DIRTY_WORKING_COPY


# Versions and manifests


class InvalidVersionError(VersionizeError, ValueError):
    """A string is not a valid ``major.minor.patch`` version."""

    kind = ErrorKind.INVALID_VERSION


class ManifestError(VersionizeError):
    """A project manifest could not be read or updated."""

    kind = ErrorKind.MANIFEST


class VersionNotFoundError(ManifestError):
    """A manifest does not declare a version field."""


class NoManifestsFoundError(ManifestError):
    """No manifest in the working copy declares a version."""

    kind = ErrorKind.NO_MANIFESTS_FOUND


class InconsistentVersionsError(ManifestError):
    """Manifests in the working copy declare different versions."""

    kind = ErrorKind.INCONSISTENT_VERSIONS


class ChangelogError(VersionizeError):
    """The changelog could not be read or written."""

    kind = ErrorKind.CHANGELOG


# Git


class GitError(VersionizeError):
    """A git command failed."""

    kind = ErrorKind.GIT

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        message = super().__str__()
        if self.stderr:
            return f"{message}: {self.stderr.strip()}"
        return message
