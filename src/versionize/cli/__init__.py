"""Command-line interface for versionize."""
