"""
Shared pytest fixtures for blockreg tests.

This module provides:
- reset_container: Clean DI container state around every test
- RecordingReporter / reporter: Progress sink that remembers what it saw
- make_definition / write_definition: Helpers for block.yml definitions
- git_repo: Factory for isolated git repositories with an initial commit
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from blockreg.core.bootstrap import reset
from blockreg.core.interfaces.reporter import IProgressReporter


@pytest.fixture(autouse=True)
def reset_container():
    """Run every test against an empty service container."""
    reset()
    yield
    reset()


class RecordingReporter(IProgressReporter):
    """Reporter that records every call as a ``(kind, text)`` tuple."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []

    def _format(self, message: str, args: tuple) -> str:
        return message % args if args else message

    def progress(self, label, action):
        self.events.append(("start", label))
        try:
            result = action()
        except BaseException:
            self.events.append(("failed", label))
            raise
        self.events.append(("ok", label))
        return result

    def check(self, label, ok):
        self.events.append(("check", f"{label}: {ok}"))
        return ok

    def info(self, message, *args):
        self.events.append(("info", self._format(message, args)))

    def warn(self, message, *args):
        self.events.append(("warn", self._format(message, args)))

    def debug(self, message, *args):
        self.events.append(("debug", self._format(message, args)))

    def error(self, message, *args):
        self.events.append(("error", self._format(message, args)))

    def labels(self, kind: str) -> list[str]:
        return [text for k, text in self.events if k == kind]


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


def _make_definition(
    name: str,
    version: str = "1.0.0",
    kind: str = "core/block-type",
    spec: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build an asset definition dict."""
    definition: dict[str, Any] = {
        "kind": kind,
        "metadata": {"name": name, "version": version},
    }
    if spec is not None:
        definition["spec"] = spec
    return definition


@pytest.fixture
def make_definition() -> Callable[..., dict[str, Any]]:
    """Factory for asset definition dicts."""
    return _make_definition


@pytest.fixture
def write_definition() -> Callable[..., Path]:
    """
    Write one or more definitions as a multi-document block.yml.

    Usage:
        write_definition(tmp_path / "users", make_definition("acme/users"))
    """

    def _write(directory: Path, *definitions: dict[str, Any], filename: str = "block.yml") -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump_all(list(definitions), f, sort_keys=False)
        return path

    return _write


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        check=True,
        text=True,
    )
    return result.stdout.strip()


@pytest.fixture
def git_repo(tmp_path: Path) -> Callable[..., Path]:
    """
    Create temporary git repositories on branch ``main``.

    Sets up:
    - Repository with local user config and signing disabled
    - README committed as the initial commit

    Returns:
        Factory taking an optional directory name and returning the repo root
    """

    def _create(name: str = "repo") -> Path:
        root = tmp_path / name
        root.mkdir(parents=True)
        _git(root, "init")
        _git(root, "symbolic-ref", "HEAD", "refs/heads/main")
        _git(root, "config", "user.email", "test@example.com")
        _git(root, "config", "user.name", "Test User")
        _git(root, "config", "commit.gpgsign", "false")
        _git(root, "config", "tag.gpgsign", "false")
        (root / "README.md").write_text("# test\n")
        _git(root, "add", "README.md")
        _git(root, "commit", "-m", "Initial commit")
        return root

    return _create


@pytest.fixture
def git() -> Callable[..., str]:
    """Run a git command in a directory and return its output."""
    return _git
