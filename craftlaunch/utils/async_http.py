"""Async HTTP client utilities."""

import asyncio
import os
from pathlib import Path
from typing import Dict, Optional

import aiofiles
import aiohttp

from ..errors import NetworkError


class AsyncHTTPClient:
    """Reusable async HTTP client.

    One session is shared by every transfer of a run, its connector limit is
    the global ceiling on simultaneous outbound connections.
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(self, headers: Optional[Dict[str, str]] = None,
                 max_connections: int = 2, timeout: float = 10.0):
        self.default_headers = headers or {}
        self.max_connections = max_connections
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(
            headers=self.default_headers,
            connector=aiohttp.TCPConnector(limit=self.max_connections),
            timeout=aiohttp.ClientTimeout(sock_connect=self.timeout, sock_read=self.timeout),
        )
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        if self.session:
            await self.session.close()
            self.session = None

    def _session(self) -> aiohttp.ClientSession:
        if self.session is None:
            raise RuntimeError("AsyncHTTPClient used outside of 'async with'")
        return self.session

    async def download(self, url: str, dest: Path) -> Path:
        """Stream a URL to a file.

        Bytes land in a sibling ``.part`` file that replaces ``dest`` only once
        complete, so an interrupted transfer never leaves a truncated target.
        """
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        part = dest.with_name(dest.name + ".part")

        try:
            async with self._session().get(url) as resp:
                resp.raise_for_status()
                async with aiofiles.open(part, 'wb') as f:
                    async for chunk in resp.content.iter_chunked(self.CHUNK_SIZE):
                        await f.write(chunk)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            if part.exists():
                part.unlink()
            raise NetworkError(url, e) from e

        os.replace(part, dest)
        return dest
