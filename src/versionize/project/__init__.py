"""Project manifest discovery and version rewriting."""

from __future__ import annotations

from versionize.project.manifests import (
    Manifest,
    ManifestSet,
    discover_manifests,
    read_version,
    write_version,
)

__all__ = [
    "Manifest",
    "ManifestSet",
    "discover_manifests",
    "read_version",
    "write_version",
]
