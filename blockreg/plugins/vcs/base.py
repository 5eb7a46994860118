"""
Base VCS handler.

Shared behaviour for handlers that can locate a repository root.
"""

from abc import abstractmethod

from ...core.interfaces.vcs import IVCSHandler


class BaseVCSHandler(IVCSHandler):
    """
    Abstract base class for VCS handlers.

    Derives ``is_repo`` from ``get_repo_root``.
    """

    @abstractmethod
    def get_repo_root(self, directory: str) -> str | None:
        """
        Get the root directory of the repository.

        Args:
            directory: Starting directory

        Returns:
            Repository root path, or None if not in a repository
        """
        pass

    def is_repo(self, directory: str) -> bool:
        return self.get_repo_root(directory) is not None
