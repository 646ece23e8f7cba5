"""Tests for git repository access."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from versionize.exceptions import GitError, NoWorkingCopyError
from versionize.vcs.git import GitRepository, discover_working_copy

if TYPE_CHECKING:
    from pathlib import Path

    from tests.conftest import TempRepo


class TestDiscoverWorkingCopy:
    """Tests for discover_working_copy()."""

    def test_discovers_root(self, temp_repo: TempRepo):
        assert discover_working_copy(temp_repo.path) == temp_repo.path.resolve()

    def test_discovers_from_subdirectory(self, temp_repo: TempRepo):
        subdir = temp_repo.path / "src" / "deep"
        subdir.mkdir(parents=True)

        assert discover_working_copy(subdir) == temp_repo.path.resolve()

    def test_no_working_copy(self, tmp_path: Path):
        directory = tmp_path / "plain"
        directory.mkdir()
        if any((p / ".git").exists() for p in (directory, *directory.parents)):
            pytest.skip("temporary directory is inside a git working copy")

        with pytest.raises(NoWorkingCopyError) as exc_info:
            discover_working_copy(directory)
        assert "do not contain a git working copy" in str(exc_info.value)

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(NoWorkingCopyError):
            discover_working_copy(tmp_path / "does-not-exist")


class TestGitRepository:
    """Tests for GitRepository against a real repository."""

    def test_empty_repository_has_no_commits(self, temp_repo: TempRepo):
        repo = GitRepository(temp_repo.path)

        assert repo.head_commits() == []
        assert repo.tags() == []

    def test_head_commits_newest_first(self, temp_repo: TempRepo):
        first = temp_repo.commit_all("feat: first")
        second = temp_repo.commit_all("fix(api): second\n\nwith a body")

        commits = GitRepository(temp_repo.path).head_commits()

        assert [c.sha for c in commits] == [second, first]
        assert commits[0].message == "fix(api): second\n\nwith a body"
        assert commits[0].parents == (first,)
        assert commits[1].parents == ()
        assert commits[0].author_name == "Gitty McGitface"

    def test_merge_commit_has_two_parents(self, temp_repo: TempRepo):
        base = temp_repo.commit_all("chore: base")
        temp_repo.git("checkout", "-q", "-b", "side")
        side = temp_repo.commit_all("fix: on side")
        temp_repo.git("checkout", "-q", "-")
        main = temp_repo.commit_all("feat: on main")
        temp_repo.git("merge", "-q", "--no-ff", "-m", "Merge branch 'side'", "side")

        commits = GitRepository(temp_repo.path).head_commits()

        assert commits[0].parents == (main, side)
        assert {c.sha for c in commits} == {commits[0].sha, base, side, main}

    def test_tags_dereference_annotated(self, temp_repo: TempRepo):
        sha = temp_repo.commit_all()
        temp_repo.tag("v1.0.0")
        temp_repo.git("tag", "-a", "v1.1.0", "-m", "annotated")
        temp_repo.tag("nightly")

        tags = {t.name: t.sha for t in GitRepository(temp_repo.path).tags()}

        assert tags == {"v1.0.0": sha, "v1.1.0": sha, "nightly": sha}

    def test_is_dirty(self, temp_repo: TempRepo):
        repo = GitRepository(temp_repo.path)
        temp_repo.commit_all()
        assert not repo.is_dirty()

        temp_repo.write("untracked.txt", "x")
        assert repo.is_dirty()

    def test_stage_commit_and_tag(self, temp_repo: TempRepo):
        temp_repo.write("a.txt", "a")
        temp_repo.commit_all()
        temp_repo.write("a.txt", "changed")
        temp_repo.write("b.txt", "not staged")
        repo = GitRepository(temp_repo.path)

        repo.stage([temp_repo.path / "a.txt"])
        sha = repo.commit("chore(release): 1.0.0")
        repo.tag("v1.0.0", sha, "1.0.0")

        assert temp_repo.head() == sha
        assert temp_repo.git("log", "-1", "--format=%s") == "chore(release): 1.0.0"
        assert temp_repo.git("status", "--porcelain") == "?? b.txt"
        assert {t.name: t.sha for t in repo.tags()} == {"v1.0.0": sha}

    def test_commit_only_given_paths(self, temp_repo: TempRepo):
        temp_repo.write("a.txt", "a")
        temp_repo.write("b.txt", "b")
        temp_repo.commit_all()
        temp_repo.write("a.txt", "release")
        temp_repo.write("b.txt", "user work")
        temp_repo.git("add", "b.txt")
        repo = GitRepository(temp_repo.path)
        repo.stage([temp_repo.path / "a.txt"])

        repo.commit("chore(release): 1.0.0", paths=[temp_repo.path / "a.txt"])

        assert temp_repo.git("show", "--name-only", "--format=", "HEAD") == "a.txt"
        assert temp_repo.git("status", "--porcelain") == "M  b.txt"

    def test_commit_with_author(self, temp_repo: TempRepo):
        temp_repo.commit_all()
        temp_repo.write("a.txt", "a")
        repo = GitRepository(temp_repo.path)
        repo.stage([temp_repo.path / "a.txt"])

        repo.commit("chore: release", author=("Release Bot", "bot@example.com"))

        assert temp_repo.git("log", "-1", "--format=%an <%ae>") == "Release Bot <bot@example.com>"

    def test_failing_command_raises(self, temp_repo: TempRepo):
        repo = GitRepository(temp_repo.path)

        with pytest.raises(GitError) as exc_info:
            repo.tag("v1.0.0", "0" * 40)
        assert exc_info.value.stderr
