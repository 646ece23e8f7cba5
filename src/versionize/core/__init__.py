"""Core business logic for versionize.

This module contains the fundamental building blocks:
- Semantic version parsing and bumping
- Conventional commit classification
- Next-version resolution
- Changelog rendering

Release orchestration lives in :mod:`versionize.core.release`.
"""

from __future__ import annotations

from versionize.core.changelog import ChangelogFile, format_commit_for_changelog, render
from versionize.core.commits import ParsedCommit, calculate_bump, classify, parse_commits
from versionize.core.resolver import ReleasePlan, ResolutionStop, StopReason, resolve
from versionize.core.version import BumpType, Version, parse_version

__all__ = [
    # Version
    "BumpType",
    # Changelog
    "ChangelogFile",
    # Commits
    "ParsedCommit",
    # Resolution
    "ReleasePlan",
    "ResolutionStop",
    "StopReason",
    "Version",
    "calculate_bump",
    "classify",
    "format_commit_for_changelog",
    "parse_commits",
    "parse_version",
    "render",
    "resolve",
]
