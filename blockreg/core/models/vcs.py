"""
VCS (Version Control System) domain models.

Provides Pydantic models for version control information.
"""

from __future__ import annotations

from pydantic import Field, computed_field

from .base import BlockregBaseModel


class CheckoutInfo(BlockregBaseModel):
    """Where the source of an asset can be checked out from."""

    url: str
    remote: str
    branch: str
    path: str = "."


class VCSStatus(BlockregBaseModel):
    """Working tree state relative to the last commit and the remote."""

    uncommitted_changes: list[str] = Field(default_factory=list)
    behind: int = 0
    ahead: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def clean(self) -> bool:
        """True when nothing is modified, staged or untracked."""
        return len(self.uncommitted_changes) == 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def up_to_date(self) -> bool:
        """True when the remote tracking branch has nothing we lack."""
        return self.behind == 0
