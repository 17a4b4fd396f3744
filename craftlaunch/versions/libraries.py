"""Library jars and platform native bundles."""

import asyncio
import logging
import zipfile
from pathlib import Path, PurePosixPath
from typing import Iterable, List, NamedTuple, Optional

from ..errors import LauncherError
from ..utils.platform import Platform
from .download_manager import DownloadEntry, DownloadManager, DownloadReport
from .models import VersionContext, VersionLibrary

logger = logging.getLogger(__name__)


class DefectiveChannel(NamedTuple):
    """A distribution channel known to serve corrupt native bundles."""
    version_id: str
    url_substring: str

    def matches(self, version_id: str, url: str) -> bool:
        return version_id == self.version_id and self.url_substring in url


DEFECTIVE_NATIVE_CHANNELS = (
    DefectiveChannel("1.8", "nightly"),
)

ALWAYS_EXCLUDED = ("META-INF/",)


def is_defective(version_id: str, url: str) -> bool:
    return any(channel.matches(version_id, url) for channel in DEFECTIVE_NATIVE_CHANNELS)


def extract_natives(archive: Path, natives_dir: Path, exclude: Iterable[str] = ()) -> int:
    """Unpack a native bundle, skipping excluded prefixes. Returns the file count."""
    excluded = tuple(ALWAYS_EXCLUDED) + tuple(exclude)
    natives_dir.mkdir(parents=True, exist_ok=True)
    count = 0
    with zipfile.ZipFile(archive, 'r') as zip_ref:
        for file_info in zip_ref.infolist():
            if file_info.filename.startswith(excluded) or file_info.is_dir():
                continue
            zip_ref.extract(file_info, natives_dir)
            count += 1
    return count


class LibraryResolver:
    def __init__(self, downloads: DownloadManager, platform: Optional[Platform] = None):
        self.downloads = downloads
        self.platform = platform or Platform.current()

    def library_entries(self, context: VersionContext) -> List[DownloadEntry]:
        entries = []
        libraries_dir = context.layout.libraries_dir
        for lib in context.metadata.libraries:
            artifact = lib.get_artifact()
            if artifact is None or not artifact.url:
                continue
            entries.append(DownloadEntry(
                url=artifact.url,
                dest=libraries_dir.joinpath(*PurePosixPath(artifact.path).parts),
                sha1=artifact.sha1,
                size=artifact.expected_size,
                name=lib.name,
            ))
        return entries

    async def resolve_libraries(self, context: VersionContext) -> DownloadReport:
        """Download every platform-independent library jar."""
        entries = self.library_entries(context)
        for parent in {entry.dest.parent for entry in entries}:
            parent.mkdir(parents=True, exist_ok=True)

        logger.info("Resolving %d libraries for %s", len(entries), context.version_id)
        report = await self.downloads.download_all(entries)
        logger.info("Libraries for %s: %s", context.version_id, report.summary())
        return report

    def native_library(self, lib: VersionLibrary):
        """Native bundle of a library for this platform, if any."""
        if lib.rules and not self.platform.allows([rule.model_dump(exclude_none=True) for rule in lib.rules]):
            return None
        return lib.get_classifier(self.platform.classifier_keys(lib.natives))

    @staticmethod
    def stamp_path(natives_dir: Path, archive_name: str) -> Path:
        return natives_dir / f".{archive_name}.extracted"

    async def resolve_natives(self, context: VersionContext) -> DownloadReport:
        """Download and unpack every native bundle matching this platform."""
        layout = context.layout
        scratch_dir = layout.natives_scratch_dir
        natives_dir = layout.natives_dir(context.version_id)
        scratch_dir.mkdir(parents=True, exist_ok=True)
        natives_dir.mkdir(parents=True, exist_ok=True)

        entries = []
        excludes = {}
        already: List[str] = []
        for lib in context.metadata.libraries:
            native = self.native_library(lib)
            if native is None:
                continue
            archive_name = PurePosixPath(native.path or native.url).name
            if self.stamp_path(natives_dir, archive_name).exists():
                already.append(lib.name)
                continue
            entry = DownloadEntry(
                url=native.url,
                dest=scratch_dir / archive_name,
                sha1=native.sha1,
                size=native.expected_size,
                name=lib.name,
            )
            entries.append(entry)
            excludes[entry.dest] = (lib.extract.exclude if lib.extract else None) or []

        async def unpack(entry: DownloadEntry):
            loop = asyncio.get_running_loop()
            try:
                if is_defective(context.version_id, entry.url):
                    logger.warning("Discarding corrupt native bundle %s", entry.url)
                else:
                    count = await loop.run_in_executor(
                        None, extract_natives, entry.dest, natives_dir, excludes[entry.dest])
                    logger.debug("Extracted %d files from %s", count, entry.dest.name)
            except zipfile.BadZipFile as e:
                raise LauncherError(f"Invalid native bundle {entry.dest.name}: {e}") from e
            finally:
                if entry.dest.exists():
                    entry.dest.unlink()
            self.stamp_path(natives_dir, entry.dest.name).touch()

        logger.info("Resolving %d native bundles for %s", len(entries), context.version_id)
        report = await self.downloads.download_all(entries, after=unpack)
        report.skipped.extend(already)
        logger.info("Natives for %s: %s", context.version_id, report.summary())
        return report
