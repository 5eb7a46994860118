"""
Tests for GitVCSHandler against real temporary git repositories.

Skipped when git is not installed.
"""

import shutil

import pytest

from blockreg.core.exceptions import VCSError
from blockreg.plugins.vcs.git import GitVCSHandler

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


@pytest.fixture
def handler():
    return GitVCSHandler()


@pytest.fixture
def remote(tmp_path, git):
    """Bare repository to push to."""
    bare = tmp_path / "remote.git"
    git(tmp_path, "init", "--bare", str(bare))
    return bare


class TestRepositoryDetection:
    """Test repository detection."""

    def test_is_repo(self, git_repo, handler):
        """Test a repository and its subdirectories are detected."""
        root = git_repo()
        sub = root / "users"
        sub.mkdir()
        assert handler.is_repo(str(root))
        assert handler.is_repo(str(sub))

    def test_plain_directory(self, tmp_path, handler):
        """Test a directory outside any repository."""
        plain = tmp_path / "plain"
        plain.mkdir()
        assert not handler.is_repo(str(plain))

    def test_identity(self, handler):
        """Test handler name and type."""
        assert handler.name == "Git"
        assert handler.type == "git"
        assert handler.is_available()


class TestStatus:
    """Test working tree status."""

    def test_clean(self, git_repo, handler):
        """Test a fresh repository is clean and up to date."""
        status = handler.get_status(str(git_repo()))
        assert status.clean
        assert status.up_to_date

    def test_untracked_file_is_dirty(self, git_repo, handler):
        """Test untracked files count as changes."""
        root = git_repo()
        (root / "new.txt").write_text("x\n")
        assert not handler.get_status(str(root)).clean

    def test_modified_file_is_dirty(self, git_repo, handler):
        """Test modified tracked files count as changes."""
        root = git_repo()
        (root / "README.md").write_text("changed\n")
        status = handler.get_status(str(root))
        assert len(status.uncommitted_changes) == 1

    def test_behind_remote(self, tmp_path, git_repo, git, handler, remote):
        """Test commits on the remote make the checkout out of date."""
        root = git_repo("work")
        git(root, "remote", "add", "origin", str(remote))
        git(root, "push", "-u", "origin", "main")

        other = tmp_path / "other"
        git(tmp_path, "clone", "--branch", "main", str(remote), str(other))
        git(other, "config", "user.email", "other@example.com")
        git(other, "config", "user.name", "Other User")
        git(other, "config", "commit.gpgsign", "false")
        (other / "change.txt").write_text("x\n")
        git(other, "add", "change.txt")
        git(other, "commit", "-m", "Remote change")
        git(other, "push", "origin", "main")

        status = handler.get_status(str(root))

        assert status.behind == 1
        assert not status.up_to_date
        assert status.clean


class TestSnapshot:
    """Test commit, branch and remote information."""

    def test_commit_and_branch(self, git_repo, git, handler):
        """Test the latest commit and branch name."""
        root = git_repo()
        assert handler.get_latest_commit(str(root)) == git(root, "rev-parse", "HEAD")
        assert handler.get_branch(str(root)) == "main"

    def test_no_remote(self, git_repo, handler):
        """Test a repository without remotes raises VCSError."""
        with pytest.raises(VCSError, match="No remotes"):
            handler.get_remote(str(git_repo()))

    def test_single_remote(self, git_repo, git, handler):
        """Test the only remote is used when nothing is tracked."""
        root = git_repo()
        git(root, "remote", "add", "upstream", "https://example.com/acme/assets.git")
        assert handler.get_remote(str(root)) == ("upstream", "main")

    def test_origin_preferred(self, git_repo, git, handler):
        """Test origin is chosen among several remotes."""
        root = git_repo()
        git(root, "remote", "add", "upstream", "https://example.com/a.git")
        git(root, "remote", "add", "origin", "https://example.com/b.git")
        assert handler.get_remote(str(root)) == ("origin", "main")

    def test_tracking_branch_wins(self, git_repo, git, handler, remote):
        """Test the tracking branch's remote is used."""
        root = git_repo()
        git(root, "remote", "add", "origin", "https://example.com/b.git")
        git(root, "remote", "add", "backup", str(remote))
        git(root, "push", "-u", "backup", "main")
        assert handler.get_remote(str(root)) == ("backup", "main")

    def test_checkout_info(self, git_repo, git, handler):
        """Test checkout info carries url, remote, branch and relative path."""
        root = git_repo()
        git(root, "remote", "add", "origin", "https://example.com/acme/assets.git")
        sub = root / "blocks" / "users"
        sub.mkdir(parents=True)

        info = handler.get_checkout_info(str(sub))

        assert info.url == "https://example.com/acme/assets.git"
        assert info.remote == "origin"
        assert info.branch == "main"
        assert info.path == "./blocks/users"

    def test_checkout_info_at_root(self, git_repo, git, handler):
        """Test the repository root is ``.``."""
        root = git_repo()
        git(root, "remote", "add", "origin", "https://example.com/acme/assets.git")
        assert handler.get_checkout_info(str(root)).path == "."


class TestTagAndPush:
    """Test tagging and pushing."""

    def test_tag_once(self, git_repo, git, handler):
        """Test a tag is created once and reported as existing afterwards."""
        root = git_repo()
        assert handler.tag(str(root), "v1.0.0") is True
        assert handler.tag(str(root), "v1.0.0") is False
        assert "v1.0.0" in git(root, "tag", "--list").splitlines()

    def test_push_with_tags(self, git_repo, git, handler, remote):
        """Test push sends the branch and its tags."""
        root = git_repo()
        git(root, "remote", "add", "origin", str(remote))
        handler.tag(str(root), "v1.0.0")

        handler.push(str(root), include_tags=True)

        refs = git(remote, "show-ref")
        assert "refs/heads/main" in refs
        assert "refs/tags/v1.0.0" in refs

    def test_push_failure(self, git_repo, git, handler, tmp_path):
        """Test a failing push raises VCSError."""
        root = git_repo()
        git(root, "remote", "add", "origin", str(tmp_path / "missing.git"))
        with pytest.raises(VCSError, match="Failed to push"):
            handler.push(str(root), include_tags=False)
