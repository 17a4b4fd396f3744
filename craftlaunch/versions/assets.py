"""Asset index and content-addressed object store."""

import logging
import shutil
from pathlib import Path
from typing import Dict, List

from ..config import LauncherSettings
from ..errors import LauncherError, MalformedMetadataError
from .download_manager import DownloadEntry, DownloadFailure, DownloadManager, DownloadReport
from .manager import read_document
from .models import AssetIndex, VersionContext

logger = logging.getLogger(__name__)


def object_path(objects_dir: Path, asset_hash: str) -> Path:
    """Storage path of an object, a function of its hash only."""
    return objects_dir / asset_hash[:2] / asset_hash


def object_url(resource_url: str, asset_hash: str) -> str:
    return f"{resource_url.rstrip('/')}/{asset_hash[:2]}/{asset_hash}"


class AssetResolver:
    def __init__(self, downloads: DownloadManager, settings: LauncherSettings):
        self.downloads = downloads
        self.settings = settings

    async def fetch_index(self, context: VersionContext) -> AssetIndex:
        """Download the asset index and mirror it to the JSON cache."""
        layout = context.layout
        descriptor = context.metadata.assetIndex
        if descriptor is None or not descriptor.url:
            raise MalformedMetadataError(layout.version_json(context.version_id), "no assetIndex")

        index_path = layout.asset_index(context.version_id)
        await self.downloads.fetch(DownloadEntry(
            url=descriptor.url,
            dest=index_path,
            sha1=descriptor.sha1,
            size=descriptor.size,
            name=f"asset index {descriptor.id or context.version_id}",
        ))

        mirror = layout.cached_asset_index(context.version_id)
        mirror.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(index_path, mirror)

        return read_document(AssetIndex, index_path)

    def object_entries(self, context: VersionContext, index: AssetIndex) -> List[DownloadEntry]:
        # Several logical paths may share one hash.
        by_hash: Dict[str, DownloadEntry] = {}
        objects_dir = context.layout.asset_objects_dir
        for logical_path, obj in index.objects.items():
            if obj.hash in by_hash:
                continue
            dest = object_path(objects_dir, obj.hash)
            by_hash[obj.hash] = DownloadEntry(
                url=object_url(self.settings.resource_url, obj.hash),
                dest=dest,
                sha1=obj.hash,
                size=obj.size,
                name=logical_path,
            )
        return list(by_hash.values())

    async def resolve_assets(self, context: VersionContext) -> DownloadReport:
        """Download every object referenced by the version's asset index.

        A missing index is reported as the step's only failure.
        """
        try:
            index = await self.fetch_index(context)
        except (LauncherError, OSError) as e:
            logger.warning("Failed to fetch asset index for %s: %s", context.version_id, e)
            url = context.metadata.assetIndex.url if context.metadata.assetIndex else ""
            return DownloadReport(failed=[DownloadFailure(name="asset index", url=url or "", error=str(e))])

        entries = self.object_entries(context, index)

        for shard in {entry.dest.parent for entry in entries}:
            shard.mkdir(parents=True, exist_ok=True)

        logger.info("Resolving %d assets for %s", len(entries), context.version_id)
        report = await self.downloads.download_all(entries)
        logger.info("Assets for %s: %s", context.version_id, report.summary())
        return report
