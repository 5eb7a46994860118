"""Diagnostic logger interface."""

from abc import ABC, abstractmethod
from typing import Any


class ILogger(ABC):
    """
    Diagnostics for whoever debugs a failed publish.

    Messages use ``%``-style arguments like stdlib logging. Anything the user
    should see while a command runs belongs on IProgressReporter.
    """

    @abstractmethod
    def debug(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    @abstractmethod
    def info(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    @abstractmethod
    def warning(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    @abstractmethod
    def error(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    @abstractmethod
    def set_level(self, level: str) -> None:
        """Change the threshold to one of debug, info, warning or error."""
