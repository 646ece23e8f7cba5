"""Shared test fixtures."""

from __future__ import annotations

import subprocess
from datetime import datetime
from pathlib import Path

import pytest

from versionize.vcs.git import Commit

CSPROJ_TEMPLATE = """\
<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
    <Version>{version}</Version>
  </PropertyGroup>
</Project>
"""


class TempRepo:
    """A throwaway git repository driven through the git executable."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def write(self, relative: str, content: str) -> Path:
        path = self.path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def csproj(self, directory: str = "", version: str = "1.0.0", name: str = "test") -> Path:
        relative = f"{directory}/{name}.csproj" if directory else f"{name}.csproj"
        return self.write(relative, CSPROJ_TEMPLATE.format(version=version))

    def commit_all(self, message: str = "feat: Initial commit") -> str:
        self.git("add", "-A")
        self.git("commit", "--allow-empty", "-m", message)
        return self.head()

    def tag(self, name: str, ref: str = "HEAD") -> None:
        self.git("tag", name, ref)

    def head(self) -> str:
        return self.git("rev-parse", "HEAD")

    def tags(self) -> list[str]:
        return self.git("tag", "--list").splitlines()

    def commit_count(self) -> int:
        return int(self.git("rev-list", "--count", "HEAD"))


@pytest.fixture
def temp_repo(tmp_path: Path) -> TempRepo:
    """Create an empty git repository with a local identity."""
    path = tmp_path / "repo"
    path.mkdir()
    repo = TempRepo(path)
    repo.git("init", "--quiet")
    repo.git("config", "user.name", "Gitty McGitface")
    repo.git("config", "user.email", "noreply@git.com")
    repo.git("config", "commit.gpgsign", "false")
    repo.git("config", "tag.gpgsign", "false")
    return repo


@pytest.fixture
def temp_git_repo_with_pyproject(temp_repo: TempRepo) -> Path:
    """Git repository with a committed pyproject.toml at version 1.0.0."""
    temp_repo.write(
        "pyproject.toml",
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.versionize]
allow_dirty = false
""",
    )
    temp_repo.commit_all("chore: initial commit")
    return temp_repo.path


def _commit(sha: str, message: str, parents: tuple[str, ...] = ()) -> Commit:
    return Commit(
        sha=sha,
        message=message,
        author_name="Test",
        author_email="test@test.com",
        date=datetime(2024, 1, 1, 12, 0, 0),
        parents=parents,
    )


@pytest.fixture
def make_commit():
    """Factory for in-memory commits."""
    return _commit


@pytest.fixture
def feat_commit() -> Commit:
    return _commit("feat123456", "feat: add user authentication")


@pytest.fixture
def fix_commit() -> Commit:
    return _commit("fix1234567", "fix(core): resolve memory leak")


@pytest.fixture
def breaking_commit() -> Commit:
    return _commit("break12345", "feat!: redesign API\n\nBREAKING CHANGE: old endpoints removed")


@pytest.fixture
def sample_commits(
    feat_commit: Commit, fix_commit: Commit, breaking_commit: Commit
) -> list[Commit]:
    """A mix of conventional and non-conventional commits, newest first."""
    return [
        breaking_commit,
        _commit("docs123456", "docs: update readme"),
        fix_commit,
        _commit("chore12345", "chore: bump dependencies"),
        feat_commit,
        _commit("plain12345", "Updated the build script"),
    ]
