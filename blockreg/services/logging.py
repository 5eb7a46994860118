"""
Diagnostic logging for blockreg.

Everything here goes to stdlib logging under the ``blockreg`` logger: HTTP
calls to the registry, handler selection, commands run, and compensation
failures during abort. What the user sees while publishing goes through the
progress reporter instead.

Handlers come from the ``[logging]`` config section::

    [logging]
    level = "info"          # debug, info, warning, error
    console = false         # also write to stderr
    file = true             # rotating file at ``path``
    path = "~/.blockreg/blockreg.log"
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, ClassVar

from ..core.interfaces.logger import ILogger
from ..core.models.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class BlockregLogger(ILogger):
    """ILogger backed by stdlib logging, configured from ``[logging]``."""

    LEVELS: ClassVar[dict[str, int]] = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    def __init__(
        self,
        config: LoggingConfig | None = None,
        *,
        verbose: bool = False,
        name: str = "blockreg",
    ) -> None:
        """
        Args:
            config: Logging section (default: built-in defaults)
            verbose: Log at debug level regardless of ``config.level``
            name: stdlib logger name
        """
        self.config = config or LoggingConfig()
        self.log_file: Path | None = None

        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        self._logger.handlers.clear()
        self._logger.propagate = False
        self._handlers: list[logging.Handler] = []

        level = "debug" if verbose else self.config.level
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        if self.config.console:
            self._add_handler(logging.StreamHandler(sys.stderr), formatter)
        if self.config.file:
            self._add_file_handler(formatter)

        self.set_level(level)

    def _add_handler(self, handler: logging.Handler, formatter: logging.Formatter) -> None:
        handler.setFormatter(formatter)
        self._logger.addHandler(handler)
        self._handlers.append(handler)

    def _add_file_handler(self, formatter: logging.Formatter) -> None:
        path = Path(self.config.path).expanduser()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(
                path, maxBytes=self.config.max_bytes, backupCount=self.config.backups
            )
        except OSError as e:
            # An unwritable log location only disables file logging
            print(f"blockreg: not logging to {path}: {e}", file=sys.stderr)
            return
        self.log_file = path
        self._add_handler(handler, formatter)

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(message, *args, **kwargs)

    def set_level(self, level: str) -> None:
        numeric = self.LEVELS.get(level.lower(), logging.WARNING)
        for handler in self._handlers:
            handler.setLevel(numeric)


class NullLogger(ILogger):
    """Discards everything. Used when nothing is registered, and in tests."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def set_level(self, level: str) -> None:
        pass
