"""
Base artifact handler.

Holds what every handler shares: the asset directory, the progress
reporter, the process runner, configuration access and content hashing.
"""

from __future__ import annotations

import hashlib
import shutil
from collections.abc import Iterable
from pathlib import Path
from typing import Any, ClassVar

from ...core.di import resolve_or_default
from ...core.interfaces.artifact import IArtifactHandler
from ...core.interfaces.reporter import IProgressReporter
from ...services.execution.process import ProcessRunner, require_tool


def _default_reporter() -> IProgressReporter:
    from ...presenters.console import NullReporter

    return resolve_or_default(IProgressReporter, NullReporter)  # type: ignore[type-abstract]


class ArtifactHandler(IArtifactHandler):
    """
    Abstract base class for artifact handlers.

    Subclasses declare ``required_tools`` for ``verify`` and implement the
    build, checksum and transfer operations.
    """

    required_tools: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        directory: str | Path,
        reporter: IProgressReporter | None = None,
        runner: ProcessRunner | None = None,
        config: Any = None,
    ) -> None:
        """
        Args:
            directory: Asset source directory (or a scratch directory on pull)
            reporter: Progress sink (default: resolved from the container)
            runner: Process runner (default: one streaming to ``reporter``)
            config: Settings object (default: loaded for ``directory``)
        """
        self.directory = Path(directory)
        self.reporter = reporter or _default_reporter()
        self.runner = runner or ProcessRunner(self.reporter)
        self._config = config

    @property
    def config(self) -> Any:
        if self._config is None:
            from ...core.settings import load_settings

            self._config = load_settings(start_dir=str(self.directory))
        return self._config

    def verify(self) -> None:
        for tool in self.required_tools:
            require_tool(tool, handler=self.artifact_type)

    def hash_files(self, paths: Iterable[Path]) -> str:
        """
        SHA-256 over the given files.

        Files are fed in sorted relative-path order, each prefixed with its
        path, so renames change the checksum as well as content edits.
        """
        digest = hashlib.sha256()
        relative = sorted(
            {Path(p).resolve().relative_to(self.directory.resolve()).as_posix() for p in paths}
        )
        for rel in relative:
            digest.update(rel.encode("utf-8"))
            digest.update(b"\0")
            with open(self.directory / rel, "rb") as f:
                for chunk in iter(lambda: f.read(65536), b""):
                    digest.update(chunk)
        return digest.hexdigest()

    def install(self, source_path: str, target_path: str) -> None:
        """Copy a pulled artifact into place."""
        source = Path(source_path)
        target = Path(target_path)
        if source.resolve() == target.resolve():
            return
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, target, dirs_exist_ok=True)


def expand_files(directory: Path, patterns: Iterable[str]) -> list[Path]:
    """
    Files matched by glob ``patterns`` under ``directory``.

    Matched directories contribute every file below them.
    """
    files: set[Path] = set()
    for pattern in patterns:
        pattern = Path(pattern.lstrip("/")).as_posix()
        if ".." in Path(pattern).parts:
            continue
        if pattern in ("", "."):
            matches = [directory]
        else:
            matches = list(directory.glob(pattern))
        for match in matches:
            if match.is_dir():
                files.update(
                    p for p in match.rglob("*") if p.is_file() and ".git" not in p.parts
                )
            elif match.is_file():
                files.add(match)
    return sorted(files)
