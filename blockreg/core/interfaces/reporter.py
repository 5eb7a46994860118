"""
Progress reporter interface.

The publish pipeline wraps every step in ``progress`` and reports checks,
so any front-end (plain console, CI log, test recorder) can follow along
without the pipeline knowing how output is rendered.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")


class IProgressReporter(ABC):
    """Interface for user-facing progress output."""

    @abstractmethod
    def progress(self, label: str, action: Callable[[], T]) -> T:
        """
        Run ``action`` as a labelled step and return its result.

        Implementations must re-raise whatever the action raises.
        """
        pass

    @abstractmethod
    def check(self, label: str, ok: bool) -> bool:
        """Report the outcome of a boolean check and return it unchanged."""
        pass

    @abstractmethod
    def info(self, message: str, *args: Any) -> None:
        pass

    @abstractmethod
    def warn(self, message: str, *args: Any) -> None:
        pass

    @abstractmethod
    def debug(self, message: str, *args: Any) -> None:
        pass

    @abstractmethod
    def error(self, message: str, *args: Any) -> None:
        pass
