"""Minecraft version installer and launcher."""

__version__ = "0.1.0"

from .config import LauncherSettings
from .errors import (
    IncompleteAssemblyError,
    LauncherError,
    MalformedMetadataError,
    MissingAssemblyError,
    NetworkError,
    VersionNotFoundError,
)
from .layout import GameLayout

__all__ = [
    "__version__", "LauncherSettings", "GameLayout", "LauncherError", "VersionNotFoundError",
    "NetworkError", "MissingAssemblyError", "MalformedMetadataError", "IncompleteAssemblyError",
]
