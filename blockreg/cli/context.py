"""
Click context extension for blockreg CLI.

Provides BlockregContext dataclass that holds blockreg-specific data
passed through the Click command chain via ctx.obj.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..core.interfaces.reporter import IProgressReporter


@dataclass
class BlockregContext:
    """Extended context passed through Click command chain.

    Created once at CLI startup, after the container is bootstrapped.

    Attributes:
        cwd: Current working directory
        verbose: Whether debug output is shown
        reporter: Progress sink shared by every command
    """

    cwd: Path
    verbose: bool
    reporter: IProgressReporter

    @classmethod
    def create(cls, verbose: bool = False, cwd: Path | None = None) -> BlockregContext:
        """Bootstrap the application and create a BlockregContext.

        Args:
            verbose: Show debug output
            cwd: Working directory override (defaults to Path.cwd())
        """
        from ..core.bootstrap import bootstrap
        from ..core.container import resolve

        bootstrap(verbose=verbose)
        return cls(
            cwd=cwd or Path.cwd(),
            verbose=verbose,
            reporter=resolve(IProgressReporter),  # type: ignore[type-abstract]
        )

    def set_verbose(self, verbose: bool) -> None:
        """Turn debug output on for the rest of the command."""
        if verbose:
            self.verbose = True
            if hasattr(self.reporter, "verbose"):
                self.reporter.verbose = True
