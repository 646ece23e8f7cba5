"""Pydantic models for versionize configuration.

Configuration lives in ``[tool.versionize]`` of the working copy's
``pyproject.toml`` or in a standalone ``versionize.toml``. Every field has a
default, so an unconfigured repository behaves like the command-line tool
with no flags.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VersionSource(StrEnum):
    """Which baseline is authoritative when tag and manifests disagree."""

    DEFAULT = "default"
    GITTAG = "gittag"
    CSPROJ = "csproj"

    @classmethod
    def lookup(cls, name: str | None) -> VersionSource | None:
        """Case-insensitive lookup by name; ``None`` if ``name`` is unknown."""
        if name is None:
            return None
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class CommitsConfig(_Model):
    """How commit types map to version bumps."""

    types_minor: list[str] = Field(default_factory=lambda: ["feat"])
    types_patch: list[str] = Field(default_factory=lambda: ["fix", "perf"])
    breaking_pattern: str = r"BREAKING CHANGE:"


class ChangelogConfig(_Model):
    """Changelog file settings."""

    path: Path = Path("CHANGELOG.md")
    include_all: bool = False
    header: str = (
        "# Change Log\n\n"
        "All notable changes to this project will be documented in this file. "
        "See [versionize](https://github.com/versionize/versionize) "
        "for commit guidelines.\n"
    )


class ManifestsConfig(_Model):
    """Which files are treated as versioned project manifests."""

    patterns: list[str] = Field(
        default_factory=lambda: [
            "**/*.csproj",
            "**/*.fsproj",
            "**/*.vbproj",
            "**/*.props",
            "**/pyproject.toml",
        ]
    )
    exclude_dirs: list[str] = Field(
        default_factory=lambda: [".git", "bin", "obj", "node_modules", ".venv", "venv"]
    )


class GitConfig(_Model):
    """Release commit and tag settings."""

    tag_prefix: str = "v"
    commit_message: str = "chore(release): {version}"
    tag_message: str = "{version}"
    author_name: str | None = None
    author_email: str | None = None


class VersionizeConfig(_Model):
    """Top-level versionize configuration."""

    allow_dirty: bool = False
    version_source: VersionSource = VersionSource.DEFAULT

    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    manifests: ManifestsConfig = Field(default_factory=ManifestsConfig)
    git: GitConfig = Field(default_factory=GitConfig)

    @field_validator("version_source", mode="before")
    @classmethod
    def _normalize_version_source(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def tag_prefix(self) -> str:
        return self.git.tag_prefix

    @property
    def changelog_path(self) -> Path:
        return self.changelog.path

    def tag_name(self, version: object) -> str:
        """Release tag name for ``version``."""
        return f"{self.git.tag_prefix}{version}"
