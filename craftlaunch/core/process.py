"""Game process spawning."""

import asyncio
import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..errors import LauncherError

logger = logging.getLogger(__name__)
game_logger = logging.getLogger("craftlaunch.game")

OutputCallback = Callable[[bytes], None]


def log_output(data: bytes):
    game_logger.info(data.decode("utf-8", errors="replace").rstrip())


class GameProcess:
    """A running game and the tasks forwarding its output."""

    def __init__(self, process: asyncio.subprocess.Process, pumps: List[asyncio.Task]):
        self.process = process
        self.pumps = pumps

    @property
    def pid(self) -> int:
        return self.process.pid

    async def wait(self) -> int:
        """Forward output until the process exits, returns its exit code."""
        await asyncio.gather(*self.pumps)
        return await self.process.wait()


class ProcessLauncher:
    async def spawn(self, executable: str, argv: Sequence[str], working_directory: Path,
                    on_stdout: Optional[OutputCallback] = None,
                    on_stderr: Optional[OutputCallback] = None) -> GameProcess:
        """Start the process, streaming each output line to the callbacks."""
        logger.debug("Spawning %s %s in %s", executable, " ".join(argv), working_directory)
        try:
            process = await asyncio.create_subprocess_exec(
                executable, *argv,
                cwd=str(working_directory),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise LauncherError(f"Cannot start {executable}: {e}") from e
        pumps = [
            asyncio.ensure_future(self._pump(process.stdout, on_stdout or log_output)),
            asyncio.ensure_future(self._pump(process.stderr, on_stderr or log_output)),
        ]
        return GameProcess(process, pumps)

    @staticmethod
    async def _pump(stream: asyncio.StreamReader, callback: OutputCallback):
        while True:
            line = await stream.readline()
            if not line:
                break
            callback(line)
