"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from versionize.config.loader import (
    extract_versionize_config,
    load_config,
    load_toml,
)
from versionize.config.models import (
    ChangelogConfig,
    CommitsConfig,
    GitConfig,
    ManifestsConfig,
    VersionizeConfig,
    VersionSource,
)
from versionize.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError


class TestVersionizeConfig:
    """Tests for VersionizeConfig model."""

    def test_default_config(self):
        """Default configuration has sensible values."""
        config = VersionizeConfig()

        assert config.allow_dirty is False
        assert config.version_source == VersionSource.DEFAULT
        assert config.tag_prefix == "v"
        assert config.changelog_path == Path("CHANGELOG.md")

    def test_nested_defaults(self):
        """Nested configurations have defaults."""
        config = VersionizeConfig()

        assert config.commits.types_minor == ["feat"]
        assert config.commits.types_patch == ["fix", "perf"]
        assert config.changelog.include_all is False
        assert config.git.commit_message == "chore(release): {version}"
        assert "**/*.csproj" in config.manifests.patterns

    def test_tag_name(self):
        assert VersionizeConfig().tag_name("1.2.3") == "v1.2.3"
        config = VersionizeConfig(git=GitConfig(tag_prefix="release-"))
        assert config.tag_name("1.2.3") == "release-1.2.3"

    def test_version_source_case_insensitive(self):
        config = VersionizeConfig.model_validate({"version_source": "GitTag"})

        assert config.version_source == VersionSource.GITTAG

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError):
            VersionizeConfig.model_validate({"no_such_option": True})


class TestVersionSource:
    """Tests for VersionSource.lookup()."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("Default", VersionSource.DEFAULT),
            ("default", VersionSource.DEFAULT),
            ("GitTag", VersionSource.GITTAG),
            ("gitTag", VersionSource.GITTAG),
            ("Csproj", VersionSource.CSPROJ),
            ("CSPROJ", VersionSource.CSPROJ),
            ("Random", None),
            (None, None),
        ],
    )
    def test_lookup(self, name: str | None, expected: VersionSource | None):
        assert VersionSource.lookup(name) == expected


class TestSectionDefaults:
    """Tests for nested models."""

    def test_commits(self):
        config = CommitsConfig(types_minor=["feature", "feat"])

        assert "feature" in config.types_minor
        assert config.breaking_pattern == "BREAKING CHANGE:"

    def test_changelog(self):
        config = ChangelogConfig()

        assert config.path == Path("CHANGELOG.md")
        assert config.header.startswith("# Change Log")

    def test_manifests(self):
        config = ManifestsConfig()

        assert "**/pyproject.toml" in config.patterns
        assert ".git" in config.exclude_dirs


class TestLoadToml:
    """Tests for load_toml()."""

    def test_load_valid_toml(self, temp_git_repo_with_pyproject: Path):
        data = load_toml(temp_git_repo_with_pyproject / "pyproject.toml")

        assert data["project"]["name"] == "test-project"

    def test_load_nonexistent_raises(self, tmp_path: Path):
        with pytest.raises(ConfigNotFoundError):
            load_toml(tmp_path / "nonexistent.toml")

    def test_load_invalid_raises(self, tmp_path: Path):
        path = tmp_path / "broken.toml"
        path.write_text("[project\nname = ")

        with pytest.raises(ConfigError):
            load_toml(path)


class TestExtractVersionizeConfig:
    """Tests for extract_versionize_config()."""

    def test_extract_existing_config(self):
        pyproject = {"tool": {"versionize": {"allow_dirty": True}}}

        assert extract_versionize_config(pyproject) == {"allow_dirty": True}

    def test_extract_missing_config(self):
        assert extract_versionize_config({"project": {"name": "test"}}) == {}


class TestLoadConfig:
    """Tests for load_config()."""

    def test_defaults_without_files(self, tmp_path: Path):
        assert load_config(tmp_path) == VersionizeConfig()

    def test_load_from_pyproject(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text(
            """\
[project]
name = "test"
version = "1.0.0"

[tool.versionize]
version_source = "csproj"

[tool.versionize.git]
tag_prefix = "release-"

[tool.versionize.changelog]
path = "docs/CHANGES.md"
include_all = true
"""
        )

        config = load_config(tmp_path)

        assert config.version_source == VersionSource.CSPROJ
        assert config.tag_prefix == "release-"
        assert config.changelog_path == Path("docs/CHANGES.md")
        assert config.changelog.include_all is True

    def test_load_with_config(self, temp_git_repo_with_pyproject: Path):
        config = load_config(temp_git_repo_with_pyproject)

        assert isinstance(config, VersionizeConfig)
        assert config.allow_dirty is False

    def test_pyproject_without_table_uses_defaults(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "test"\nversion = "1.0.0"\n')

        assert load_config(tmp_path) == VersionizeConfig()

    def test_standalone_file_takes_precedence(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text('[tool.versionize]\nallow_dirty = false\n')
        (tmp_path / "versionize.toml").write_text("allow_dirty = true\n")

        assert load_config(tmp_path).allow_dirty is True

    def test_invalid_values_raise(self, tmp_path: Path):
        (tmp_path / "versionize.toml").write_text('allow_dirty = "sometimes"\n')

        with pytest.raises(ConfigValidationError):
            load_config(tmp_path)

    def test_unknown_version_source_raises(self, tmp_path: Path):
        (tmp_path / "versionize.toml").write_text('version_source = "svn"\n')

        with pytest.raises(ConfigValidationError):
            load_config(tmp_path)
