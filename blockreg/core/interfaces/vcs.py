"""
Version control system handler interface definitions.

Enables pluggable VCS backends (Git today) that the publish pipeline
drives for working tree checks, snapshots and tagging.
"""

from abc import ABC, abstractmethod

from blockreg.core.models.vcs import CheckoutInfo, VCSStatus


class IVCSHandler(ABC):
    """
    Interface for version control system operations.

    Implementations handle VCS-specific operations while
    conforming to this common interface.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name, e.g. 'Git'."""
        pass

    @property
    @abstractmethod
    def type(self) -> str:
        """
        VCS identifier recorded in repository snapshots.

        Examples: 'git', 'hg'
        """
        pass

    @abstractmethod
    def is_repo(self, directory: str) -> bool:
        """Check whether ``directory`` lives inside a repository of this kind."""
        pass

    @abstractmethod
    def get_status(self, directory: str) -> VCSStatus:
        """
        Refresh remote state and describe the working tree.

        Args:
            directory: Any directory inside the repository

        Returns:
            VCSStatus with uncommitted changes and ahead/behind counts
        """
        pass

    @abstractmethod
    def get_latest_commit(self, directory: str) -> str | None:
        """Full id of the checked out commit, or None for an empty repository."""
        pass

    @abstractmethod
    def get_branch(self, directory: str) -> str | None:
        """Name of the checked out branch."""
        pass

    @abstractmethod
    def get_remote(self, directory: str) -> tuple[str, str]:
        """(remote name, branch) to push to."""
        pass

    @abstractmethod
    def get_checkout_info(self, directory: str) -> CheckoutInfo:
        """Remote url, remote, branch and path of ``directory`` in the repository."""
        pass

    @abstractmethod
    def tag(self, directory: str, tag: str) -> bool:
        """
        Create a tag on the current commit.

        Returns:
            False if the tag already existed, True if it was created
        """
        pass

    @abstractmethod
    def push(self, directory: str, include_tags: bool) -> None:
        """Push the current branch (and tags) to the detected remote."""
        pass

    def is_working_directory_clean(self, directory: str) -> bool:
        return self.get_status(directory).clean

    def is_working_directory_up_to_date(self, directory: str) -> bool:
        return self.get_status(directory).up_to_date

    def is_available(self) -> bool:
        """
        Check if this VCS is available on the system.

        Returns:
            True if the VCS tool is installed
        """
        return True
