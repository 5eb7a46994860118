"""
Interfaces for blockreg services and plugins.
"""

from .artifact import IArtifactHandler
from .logger import ILogger
from .reporter import IProgressReporter
from .vcs import IVCSHandler

__all__ = [
    "IArtifactHandler",
    "ILogger",
    "IProgressReporter",
    "IVCSHandler",
]
