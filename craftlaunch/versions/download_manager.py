"""Download manager for assets and libraries."""

import asyncio
import hashlib
import logging
from pathlib import Path
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

import aiofiles
from pydantic import BaseModel

from ..errors import LauncherError
from ..utils.async_http import AsyncHTTPClient

logger = logging.getLogger(__name__)


class DownloadEntry(BaseModel):
    url: str
    dest: Path
    sha1: Optional[str] = None
    size: Optional[int] = None
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or self.dest.name


class DownloadFailure(BaseModel):
    name: str
    url: str
    error: str


class DownloadReport(BaseModel):
    """Outcome of a batch: downloaded, already present and failed items."""

    succeeded: List[str] = []
    skipped: List[str] = []
    failed: List[DownloadFailure] = []

    @property
    def complete(self) -> bool:
        return not self.failed

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.skipped) + len(self.failed)

    def merge(self, other: "DownloadReport") -> "DownloadReport":
        return DownloadReport(
            succeeded=self.succeeded + other.succeeded,
            skipped=self.skipped + other.skipped,
            failed=self.failed + other.failed,
        )

    def summary(self) -> str:
        return (f"{len(self.succeeded)} downloaded, {len(self.skipped)} already present, "
                f"{len(self.failed)} failed")


class DownloadManager:
    """Bounded pool of download tasks over a shared HTTP client."""

    def __init__(self, http: AsyncHTTPClient, concurrent_downloads: int = 2,
                 verify_existing: bool = True):
        self.http = http
        self.concurrent_downloads = concurrent_downloads
        self.verify_existing = verify_existing

    @staticmethod
    async def verify_sha1(file_path: Path, expected_sha1: str) -> bool:
        """Verify SHA1 hash of a file."""
        hash_sha1 = hashlib.sha1()
        async with aiofiles.open(file_path, 'rb') as f:
            while chunk := await f.read(8192):
                hash_sha1.update(chunk)
        return hash_sha1.hexdigest() == expected_sha1.lower()

    async def is_present(self, entry: DownloadEntry) -> bool:
        """Whether ``entry.dest`` can be reused as is."""
        if not entry.dest.is_file():
            return False
        if not self.verify_existing:
            return True
        if entry.size is not None and entry.dest.stat().st_size != entry.size:
            logger.info("Size mismatch for %s, downloading again", entry.label)
            return False
        if entry.sha1 and not await self.verify_sha1(entry.dest, entry.sha1):
            logger.info("Hash mismatch for %s, downloading again", entry.label)
            return False
        return True

    async def fetch(self, entry: DownloadEntry) -> bool:
        """Download one entry unless present. Errors propagate.

        Returns True if a transfer happened.
        """
        if await self.is_present(entry):
            logger.debug("Already present: %s", entry.dest)
            return False
        await self.http.download(entry.url, entry.dest)
        if entry.sha1 and not await self.verify_sha1(entry.dest, entry.sha1):
            entry.dest.unlink()
            raise LauncherError(f"Downloaded {entry.label} does not match its sha1 {entry.sha1}")
        logger.debug("Downloaded %s", entry.dest)
        return True

    async def download_all(self, entries: Iterable[DownloadEntry],
                           after: Optional[Callable[[DownloadEntry], Awaitable[None]]] = None) -> DownloadReport:
        """Download every entry with bounded concurrency.

        A failing entry is logged and recorded, it never cancels its siblings.
        ``after(entry)`` runs inside the item boundary once the file is in
        place, its failures count as the item's failure.
        """
        unique: Dict[Path, DownloadEntry] = {}
        for entry in entries:
            unique.setdefault(entry.dest, entry)

        report = DownloadReport()
        semaphore = asyncio.Semaphore(self.concurrent_downloads)

        async def worker(entry: DownloadEntry):
            async with semaphore:
                try:
                    downloaded = await self.fetch(entry)
                    if after is not None:
                        await after(entry)
                except (LauncherError, OSError) as e:
                    logger.warning("Failed to download %s: %s", entry.label, e)
                    report.failed.append(DownloadFailure(name=entry.label, url=entry.url, error=str(e)))
                    return
            (report.succeeded if downloaded else report.skipped).append(entry.label)

        await asyncio.gather(*(worker(entry) for entry in unique.values()))
        return report
