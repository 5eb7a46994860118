"""
Console progress reporter for terminal output.

Steps print ``<label> - START`` / ``- OK`` / ``- FAILED``; everything logged
while a step runs is indented one `` - `` per nesting level.
"""

import sys
from collections.abc import Callable
from typing import Any, TypeVar

from ..core.interfaces.reporter import IProgressReporter

T = TypeVar("T")

CHECK_OK = "✔"
CHECK_FAILED = "✖"


def _format(message: str, args: tuple) -> str:
    if not args:
        return str(message)
    try:
        return str(message) % args
    except (TypeError, ValueError):
        return " ".join([str(message), *(str(a) for a in args)])


class ConsoleReporter(IProgressReporter):
    """
    Plain console reporter.

    Debug output (including streamed tool output) is shown only when
    ``verbose`` is set.
    """

    def __init__(self, verbose: bool = False, use_color: bool = True, file=None) -> None:
        """
        Initialize console reporter.

        Args:
            verbose: Show debug lines
            use_color: Whether to use ANSI color codes
            file: Output file (defaults to sys.stdout)
        """
        self.verbose = verbose
        self._file = file or sys.stdout
        self._use_color = use_color and hasattr(self._file, "isatty") and self._file.isatty()
        self._nesting = 0

    def _prefix(self) -> str:
        return " - " * self._nesting

    def _color(self, text: str, code: str) -> str:
        if self._use_color:
            return f"\033[{code}m{text}\033[0m"
        return text

    def _println(self, text: str) -> None:
        print(self._prefix() + text, file=self._file)

    def progress(self, label: str, action: Callable[[], T]) -> T:
        self._println(f"{label} - START")
        self._nesting += 1
        try:
            result = action()
        except BaseException:
            self._nesting -= 1
            self._println(self._color(f"{label} - FAILED", "91"))
            raise
        self._nesting -= 1
        self._println(self._color(f"{label} - OK", "92"))
        return result

    def check(self, label: str, ok: bool) -> bool:
        mark = self._color(CHECK_OK, "92") if ok else self._color(CHECK_FAILED, "91")
        self._println(f"{label}: {mark}")
        return ok

    def info(self, message: str, *args: Any) -> None:
        self._println(_format(message, args))

    def warn(self, message: str, *args: Any) -> None:
        self._println(self._color(_format(message, args), "93"))

    def debug(self, message: str, *args: Any) -> None:
        if self.verbose:
            self._println(self._color(_format(message, args), "94"))

    def error(self, message: str, *args: Any) -> None:
        self._println(self._color(_format(message, args), "91"))


class NullReporter(IProgressReporter):
    """Reporter that runs steps and prints nothing."""

    def progress(self, label: str, action: Callable[[], T]) -> T:
        return action()

    def check(self, label: str, ok: bool) -> bool:
        return ok

    def info(self, message: str, *args: Any) -> None:
        pass

    def warn(self, message: str, *args: Any) -> None:
        pass

    def debug(self, message: str, *args: Any) -> None:
        pass

    def error(self, message: str, *args: Any) -> None:
        pass
