"""Publishing asset sources to the registry."""

from .definitions import AssetSource, find_definition_file, read_definitions
from .dependencies import DependencyResolver, LocalVersionCache
from .pipeline import PublishOptions, PublishPipeline, PublishResult

__all__ = [
    "AssetSource",
    "DependencyResolver",
    "LocalVersionCache",
    "PublishOptions",
    "PublishPipeline",
    "PublishResult",
    "find_definition_file",
    "read_definitions",
]
