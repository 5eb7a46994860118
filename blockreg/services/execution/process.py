"""
External process execution for artifact and VCS handlers.

By default stdout and stderr are merged and every line is streamed to the
progress reporter as debug output. Callers that parse output read stdout
alone through ``ProcessRunner.output``; stderr then goes to the reporter only.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from ...core.di import resolve_or_default
from ...core.exceptions import ProcessExecutionError, ToolNotFoundError
from ...core.interfaces.logger import ILogger
from ...core.interfaces.reporter import IProgressReporter


def _get_logger() -> ILogger:
    from ..logging import NullLogger

    return resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]


@dataclass
class ProcessResult:
    """Exit code and output of a finished command."""

    exit_code: int
    output: str
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ProcessRunner:
    """Runs external commands and streams their output line by line."""

    def __init__(self, reporter: IProgressReporter | None = None) -> None:
        self._reporter = reporter

    def run(
        self,
        command: list[str],
        cwd: str | Path | None = None,
        *,
        check: bool = True,
        env: dict[str, str] | None = None,
        merge_stderr: bool = True,
    ) -> ProcessResult:
        """
        Run ``command`` in ``cwd``.

        Args:
            command: Executable and arguments
            cwd: Working directory
            check: Raise on non-zero exit
            env: Full environment for the child (default: inherit)
            merge_stderr: Fold stderr into ``output``. When off, stderr is
                kept in ``ProcessResult.stderr`` and ``output`` is stdout only.

        Returns:
            ProcessResult with exit code and output

        Raises:
            ToolNotFoundError: If the executable does not exist
            ProcessExecutionError: If ``check`` is set and the command fails
        """
        display = " ".join(command)
        _get_logger().debug("Running %s in %s", display, cwd or ".")

        try:
            proc = subprocess.Popen(
                command,
                cwd=str(cwd) if cwd else None,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                text=True,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(command[0]) from e

        if merge_stderr:
            lines = self._stream(proc)
            exit_code = proc.wait()
            result = ProcessResult(exit_code=exit_code, output="\n".join(lines))
        else:
            stdout, stderr = proc.communicate()
            for line in stderr.splitlines():
                self._report(line)
            result = ProcessResult(
                exit_code=proc.returncode, output=stdout.rstrip("\n"), stderr=stderr.rstrip("\n")
            )

        if check and not result.ok:
            _get_logger().debug("Command %s exited with %d", display, result.exit_code)
            raise ProcessExecutionError(
                f"Command failed: {display}",
                exit_code=result.exit_code,
                command=display,
                output=result.output if merge_stderr else result.stderr,
            )
        return result

    def _report(self, line: str) -> None:
        if self._reporter is not None:
            self._reporter.debug(line)

    def _stream(self, proc: subprocess.Popen) -> list[str]:
        lines: list[str] = []
        assert proc.stdout is not None
        with proc.stdout:
            for line in proc.stdout:
                line = line.rstrip("\n")
                lines.append(line)
                self._report(line)
        return lines

    def output(self, command: list[str], cwd: str | Path | None = None) -> str:
        """Run a command that must succeed and return its stripped stdout."""
        return self.run(command, cwd, check=True, merge_stderr=False).output.strip()


def which(tool: str) -> str | None:
    return shutil.which(tool)


def require_tool(tool: str, handler: str | None = None) -> str:
    """
    Resolve ``tool`` on PATH.

    Raises:
        ToolNotFoundError: If the tool is not installed
    """
    path = which(tool)
    if path is None:
        raise ToolNotFoundError(tool, handler=handler)
    return path
