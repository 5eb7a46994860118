"""External process execution."""

from .process import ProcessResult, ProcessRunner, require_tool

__all__ = ["ProcessResult", "ProcessRunner", "require_tool"]
