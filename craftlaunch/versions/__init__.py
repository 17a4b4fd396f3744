"""Version management module."""

from .manager import ManifestStore
from .download_manager import DownloadManager, DownloadReport
from .assets import AssetResolver
from .libraries import LibraryResolver
from .assembler import ResolvedVersion, VersionAssembler
from .models import VersionManifest, VersionInfo, VersionMetadata

__all__ = [
    "ManifestStore", "DownloadManager", "DownloadReport", "AssetResolver", "LibraryResolver",
    "ResolvedVersion", "VersionAssembler", "VersionManifest", "VersionInfo", "VersionMetadata",
]
