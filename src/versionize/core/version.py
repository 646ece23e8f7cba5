"""Semantic version parsing and bumping.

Versions are plain ``major.minor.patch`` triples. Pre-release and build
metadata are not part of the release model: a release tag is always
``<prefix><major>.<minor>.<patch>``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from versionize.exceptions import InvalidVersionError

_VERSION_RE = re.compile(r"^v?(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)$")


class BumpType(IntEnum):
    """Magnitude of a version change, ordered ``NONE < PATCH < MINOR < MAJOR``."""

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def combine(cls, *bumps: BumpType) -> BumpType:
        """Combine severities; the result is the largest of them."""
        return max(bumps, default=cls.NONE)

    @classmethod
    def between(cls, old: Version, new: Version) -> BumpType:
        """Label the change from ``old`` to ``new`` by its most significant component."""
        if new.major != old.major:
            return cls.MAJOR
        if new.minor != old.minor:
            return cls.MINOR
        if new.patch != old.patch:
            return cls.PATCH
        return cls.NONE


@dataclass(frozen=True, order=True)
class Version:
    """An immutable semantic version.

    Ordering is lexicographic on ``(major, minor, patch)``.
    """

    major: int
    minor: int
    patch: int

    ZERO: ClassVar[Version]

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise InvalidVersionError(f"Version components must be non-negative: {self!r}")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse ``X.Y.Z`` (optionally prefixed with ``v``).

        Raises:
            InvalidVersionError: If ``text`` is not a plain semantic version
        """
        match = _VERSION_RE.match(text.strip())
        if not match:
            raise InvalidVersionError(f"Invalid version: {text!r} (expected MAJOR.MINOR.PATCH)")
        return cls(int(match["major"]), int(match["minor"]), int(match["patch"]))

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for ``bump_type``.

        The bumped component is incremented and every lower component is reset
        to zero. ``BumpType.NONE`` returns ``self``.
        """
        if bump_type == BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type == BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if bump_type == BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return self


Version.ZERO = Version(0, 0, 0)


def parse_version(text: str) -> Version:
    """Parse a version string. See :meth:`Version.parse`."""
    return Version.parse(text)
