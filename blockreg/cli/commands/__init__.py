"""
Click command implementations for blockreg CLI.

Each module corresponds to a blockreg command (e.g., publish.py implements
'blockreg publish'). Commands are registered with the main CLI group via
the register_commands() function in blockreg.cli.
"""

from .install import install
from .publish import publish
from .pull import pull
from .view import view

COMMANDS = [
    install,
    publish,
    pull,
    view,
]

__all__ = [
    "COMMANDS",
    "install",
    "publish",
    "pull",
    "view",
]
