"""
Git VCS handler.

Implements working tree checks, snapshots, tagging and pushing for Git
repositories by shelling out to the git executable.
"""

import contextlib
import os
import subprocess
from pathlib import Path

from ...core.exceptions import VCSError
from ...core.models.vcs import CheckoutInfo, VCSStatus
from .base import BaseVCSHandler


def _git(args: list[str], cwd: str) -> str:
    out = subprocess.check_output(["git", *args], cwd=cwd, stderr=subprocess.DEVNULL)
    return out.decode().strip()


class GitVCSHandler(BaseVCSHandler):
    """Git version control handler."""

    @property
    def name(self) -> str:
        return "Git"

    @property
    def type(self) -> str:
        return "git"

    def is_available(self) -> bool:
        """Check if git is installed."""
        try:
            subprocess.run(["git", "--version"], capture_output=True, check=True)
            return True
        except (subprocess.CalledProcessError, FileNotFoundError):
            return False

    def get_repo_root(self, directory: str) -> str | None:
        try:
            return _git(["rev-parse", "--show-toplevel"], directory)
        except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
            return None

    def get_status(self, directory: str) -> VCSStatus:
        """Fetch remote refs, then report local changes and divergence from upstream."""
        # Offline or remote-less repositories still get a local status
        with contextlib.suppress(subprocess.CalledProcessError):
            _git(["remote", "update"], directory)

        try:
            porcelain = subprocess.check_output(
                ["git", "status", "--porcelain=v1"], cwd=directory, stderr=subprocess.DEVNULL
            ).decode()
        except subprocess.CalledProcessError as e:
            raise VCSError("Failed to read git status", repo_path=directory, cause=e) from e

        ahead = behind = 0
        with contextlib.suppress(subprocess.CalledProcessError, ValueError):
            counts = _git(["rev-list", "--left-right", "--count", "HEAD...@{u}"], directory)
            ahead_str, behind_str = counts.split()
            ahead, behind = int(ahead_str), int(behind_str)

        return VCSStatus(
            uncommitted_changes=[line for line in porcelain.splitlines() if line.strip()],
            ahead=ahead,
            behind=behind,
        )

    def get_latest_commit(self, directory: str) -> str | None:
        with contextlib.suppress(subprocess.CalledProcessError):
            return _git(["rev-parse", "HEAD"], directory)
        return None

    def get_branch(self, directory: str) -> str | None:
        with contextlib.suppress(subprocess.CalledProcessError):
            return _git(["rev-parse", "--abbrev-ref", "HEAD"], directory)
        return None

    def _list_remotes(self, directory: str) -> list[str]:
        try:
            return [r for r in _git(["remote"], directory).splitlines() if r.strip()]
        except subprocess.CalledProcessError:
            return []

    def get_remote(self, directory: str) -> tuple[str, str]:
        """
        Remote and branch to push to.

        Uses the tracking branch when there is one, otherwise the only
        remote, otherwise ``origin``.

        Raises:
            VCSError: If no remote can be chosen
        """
        with contextlib.suppress(subprocess.CalledProcessError):
            tracking = _git(
                ["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"], directory
            )
            if "/" in tracking:
                remote, branch = tracking.split("/", 1)
                return remote, branch

        branch = self.get_branch(directory) or "HEAD"
        remotes = self._list_remotes(directory)

        if not remotes:
            raise VCSError("No remotes defined for git repository.", repo_path=directory)
        if len(remotes) == 1:
            return remotes[0], branch
        if "origin" in remotes:
            return "origin", branch

        raise VCSError(
            "Failed to identify remote to use and local branch is not tracking any.",
            repo_path=directory,
        )

    def get_checkout_info(self, directory: str) -> CheckoutInfo:
        """
        Describe where ``directory`` can be checked out from.

        Raises:
            VCSError: If the remote has no url
        """
        remote, branch = self.get_remote(directory)

        try:
            url = _git(["remote", "get-url", remote], directory)
        except subprocess.CalledProcessError as e:
            raise VCSError(
                "Failed to identify remote checkout url to use. "
                "Verify that your local repository is properly configured.",
                repo_path=directory,
                cause=e,
            ) from e

        root = self.get_repo_root(directory) or directory
        relative = os.path.relpath(Path(directory).resolve(), Path(root).resolve())
        path = "." if relative == "." else f"./{Path(relative).as_posix()}"

        return CheckoutInfo(url=url, remote=remote, branch=branch, path=path)

    def tag(self, directory: str, tag: str) -> bool:
        """Create ``tag`` unless it exists already."""
        try:
            existing = _git(["tag", "--list"], directory).splitlines()
            if tag in (t.strip() for t in existing):
                return False
            _git(["tag", tag], directory)
        except subprocess.CalledProcessError as e:
            raise VCSError(f"Failed to create tag {tag}", repo_path=directory, cause=e) from e
        return True

    def push(self, directory: str, include_tags: bool) -> None:
        remote, branch = self.get_remote(directory)
        try:
            _git(["push", remote, branch], directory)
            if include_tags:
                _git(["push", remote, "--tags"], directory)
        except subprocess.CalledProcessError as e:
            raise VCSError(
                f"Failed to push to {remote}/{branch}", repo_path=directory, cause=e
            ) from e
