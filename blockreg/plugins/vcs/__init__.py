"""VCS handlers."""

from .git import GitVCSHandler

__all__ = ["GitVCSHandler"]
