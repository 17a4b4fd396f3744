"""Version manifest and metadata store."""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..config import LauncherSettings
from ..errors import MalformedMetadataError, MissingAssemblyError, VersionNotFoundError
from ..layout import GameLayout
from ..utils.async_http import AsyncHTTPClient
from .download_manager import DownloadEntry, DownloadManager
from .models import VersionInfo, VersionManifest, VersionMetadata

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def parse_document(model: Type[M], data: Any, source) -> M:
    """Validate a decoded JSON document against a model."""
    if not isinstance(data, dict):
        raise MalformedMetadataError(source, "expected a JSON object")
    try:
        return model(**data)
    except ValidationError as e:
        raise MalformedMetadataError(source, e) from e


def read_document(model: Type[M], path: Path) -> M:
    """Read and validate a JSON document from disk."""
    if not path.is_file():
        raise MissingAssemblyError(path, "document")
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedMetadataError(path, e) from e
    return parse_document(model, data, path)


class ManifestStore:
    """Fetches and caches the version manifest and per-version metadata."""

    def __init__(self, layout: GameLayout, http: AsyncHTTPClient,
                 settings: Optional[LauncherSettings] = None):
        self.layout = layout
        self.http = http
        self.settings = settings or LauncherSettings()
        self._manifest: Optional[VersionManifest] = None

    async def load_manifest(self, refresh: bool = False) -> VersionManifest:
        """Return the manifest, downloading it if not cached or on refresh."""
        if self._manifest is not None and not refresh:
            return self._manifest

        cache_path = self.layout.manifest_file
        if refresh or not cache_path.is_file():
            logger.info("Fetching version manifest from %s", self.settings.manifest_url)
            await self.http.download(self.settings.manifest_url, cache_path)

        self._manifest = read_document(VersionManifest, cache_path)
        return self._manifest

    async def get_version_info(self, version_id: str) -> VersionInfo:
        """Manifest entry of an allowed type for a version id."""
        manifest = await self.load_manifest()
        for version in manifest.versions:
            if version.id == version_id and version.type in self.settings.version_types:
                return version
        raise VersionNotFoundError(version_id)

    async def resolve_version_url(self, version_id: str) -> str:
        return (await self.get_version_info(version_id)).url

    async def fetch_metadata(self, version_id: str) -> VersionMetadata:
        """Fetch and parse version.json for a specific version."""
        info = await self.get_version_info(version_id)
        entry = DownloadEntry(
            url=info.url,
            dest=self.layout.version_json(version_id),
            sha1=info.sha1,
            name=f"{version_id}.json",
        )
        manager = DownloadManager(self.http, verify_existing=self.settings.verify_existing)
        if await manager.fetch(entry):
            logger.info("Downloaded metadata for %s", version_id)
        return read_document(VersionMetadata, entry.dest)

    def load_local_metadata(self, version_id: str) -> VersionMetadata:
        """Parse an already installed version.json without network access."""
        return read_document(VersionMetadata, self.layout.version_json(version_id))

    def has_local_metadata(self, version_id: str) -> bool:
        return self.layout.version_json(version_id).is_file()

