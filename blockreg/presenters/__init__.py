"""Output presenters."""

from .console import ConsoleReporter, NullReporter

__all__ = ["ConsoleReporter", "NullReporter"]
