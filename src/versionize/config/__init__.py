"""Configuration management for versionize."""

from __future__ import annotations

from versionize.config.loader import load_config
from versionize.config.models import (
    ChangelogConfig,
    CommitsConfig,
    GitConfig,
    ManifestsConfig,
    VersionizeConfig,
    VersionSource,
)

__all__ = [
    "ChangelogConfig",
    "CommitsConfig",
    "GitConfig",
    "ManifestsConfig",
    "VersionSource",
    "VersionizeConfig",
    "load_config",
]
