"""Orchestrates the download of one version."""

import logging
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict

from ..config import LauncherSettings
from ..errors import IncompleteAssemblyError, MalformedMetadataError
from ..layout import GameLayout
from ..utils.async_http import AsyncHTTPClient
from ..utils.platform import Platform
from .assets import AssetResolver
from .download_manager import DownloadEntry, DownloadManager, DownloadReport
from .libraries import LibraryResolver
from .manager import ManifestStore
from .models import VersionContext

logger = logging.getLogger(__name__)


class ResolvedVersion(BaseModel):
    """A version whose files are all in place on disk."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    context: VersionContext
    reports: Dict[str, DownloadReport] = {}
    base: Optional["ResolvedVersion"] = None

    @property
    def version_id(self) -> str:
        return self.context.version_id

    @property
    def report(self) -> DownloadReport:
        """All bulk steps combined, base version included."""
        total = self.base.report if self.base is not None else DownloadReport()
        for step_report in self.reports.values():
            total = total.merge(step_report)
        return total

    @property
    def complete(self) -> bool:
        return self.report.complete


class VersionAssembler:
    """Runs metadata, client jar, assets, libraries and natives in order."""

    def __init__(self, layout: GameLayout, http: AsyncHTTPClient,
                 settings: Optional[LauncherSettings] = None,
                 platform: Optional[Platform] = None):
        self.layout = layout
        self.settings = settings or LauncherSettings()
        self.downloads = DownloadManager(
            http,
            concurrent_downloads=self.settings.max_connections,
            verify_existing=self.settings.verify_existing,
        )
        self.manifest = ManifestStore(layout, http, self.settings)
        self.assets = AssetResolver(self.downloads, self.settings)
        self.libraries = LibraryResolver(self.downloads, platform)

    async def ensure_version_ready(self, version_id: str, strict: bool = False,
                                   refresh: bool = False) -> ResolvedVersion:
        """Make sure every file of a version exists locally.

        An installed overlay profile (one with ``inheritsFrom``) is resolved
        by assembling its base version first, then its own libraries.
        ``refresh`` downloads the version manifest again before the lookup.
        """
        if self.manifest.has_local_metadata(version_id):
            metadata = self.manifest.load_local_metadata(version_id)
            if metadata.is_overlay:
                resolved = await self._ensure_overlay_ready(VersionContext(
                    version_id=version_id, layout=self.layout, metadata=metadata), refresh)
                return self._check(resolved, strict)

        logger.info("Downloading version %s", version_id)
        if refresh:
            await self.manifest.load_manifest(refresh=True)
        metadata = await self.manifest.fetch_metadata(version_id)
        context = VersionContext(version_id=version_id, layout=self.layout, metadata=metadata)

        await self.ensure_client_jar(context)

        reports = {
            "assets": await self.assets.resolve_assets(context),
            "libraries": await self.libraries.resolve_libraries(context),
            "natives": await self.libraries.resolve_natives(context),
        }
        resolved = ResolvedVersion(context=context, reports=reports)
        logger.info("Version %s ready: %s", version_id, resolved.report.summary())
        return self._check(resolved, strict)

    async def ensure_client_jar(self, context: VersionContext):
        client = context.metadata.downloads.client if context.metadata.downloads else None
        if client is None or not client.url:
            raise MalformedMetadataError(
                self.layout.version_json(context.version_id), "no client download")
        downloaded = await self.downloads.fetch(DownloadEntry(
            url=client.url,
            dest=self.layout.version_jar(context.version_id),
            sha1=client.sha1,
            size=client.expected_size,
            name=f"{context.version_id}.jar",
        ))
        if downloaded:
            logger.info("Downloaded client %s.jar", context.version_id)

    async def _ensure_overlay_ready(self, context: VersionContext, refresh: bool = False) -> ResolvedVersion:
        base_id = context.metadata.inheritsFrom
        logger.info("Version %s inherits from %s", context.version_id, base_id)
        base = await self.ensure_version_ready(base_id, refresh=refresh)

        jar = self.layout.version_jar(context.version_id)
        if not jar.is_file() and context.metadata.downloads and context.metadata.downloads.client:
            await self.ensure_client_jar(context)

        reports = {"libraries": await self.libraries.resolve_libraries(context)}
        return ResolvedVersion(context=context, reports=reports, base=base)

    @staticmethod
    def _check(resolved: ResolvedVersion, strict: bool) -> ResolvedVersion:
        if strict and not resolved.complete:
            raise IncompleteAssemblyError(
                resolved.version_id, [failure.name for failure in resolved.report.failed])
        return resolved

