#!/usr/bin/env python3
"""Launcher command line entry point"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import LauncherSettings
from .core.game_launcher import GameLauncher, LaunchOptions, MemoryOptions, split_version
from .errors import LauncherError
from .layout import GameLayout
from .utils.async_http import AsyncHTTPClient
from .utils.logger import setup_logging
from .versions.assembler import VersionAssembler

logger = logging.getLogger("craftlaunch")

DEFAULT_ROOT = Path.home() / ".minecraft"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="craftlaunch", description="Install and launch Minecraft versions.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--root", type=Path, default=DEFAULT_ROOT, help="game directory (default: %(default)s)")
    parser.add_argument("--settings", type=Path, help="JSON settings file")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug messages to the console")

    commands = parser.add_subparsers(dest="command", required=True)

    install = commands.add_parser("install", help="download every file of a version")
    install.add_argument("version_id")
    install.add_argument("--strict", action="store_true", help="fail if any download failed")
    install.add_argument("--refresh", action="store_true", help="download the version list again")

    launch = commands.add_parser("launch", help="install if needed, then start the game")
    launch.add_argument("version_id")
    launch.add_argument("-u", "--username", required=True)
    launch.add_argument("--min", dest="min_memory", default="1G")
    launch.add_argument("--max", dest="max_memory", default="2G")
    launch.add_argument("--skip-install", action="store_true", help="use the files already on disk")
    launch.add_argument("--refresh", action="store_true", help="download the version list again")
    return parser


async def install(layout: GameLayout, settings: LauncherSettings, version_ids: List[str],
                  strict: bool = False, refresh: bool = False) -> bool:
    async with AsyncHTTPClient(max_connections=settings.max_connections, timeout=settings.timeout) as http:
        assembler = VersionAssembler(layout, http, settings)
        complete = True
        for version_id in version_ids:
            resolved = await assembler.ensure_version_ready(version_id, strict=strict, refresh=refresh)
            # The refreshed manifest is kept in memory for the next ids.
            refresh = False
            print(f"{version_id}: {resolved.report.summary()}")
            complete = complete and resolved.complete
        return complete


async def launch(layout: GameLayout, settings: LauncherSettings, args) -> int:
    base_id, overlay_id = split_version(args.version_id)
    if not args.skip_install:
        await install(layout, settings, [overlay_id or base_id], refresh=args.refresh)

    options = LaunchOptions(
        memory=MemoryOptions(min=args.min_memory, max=args.max_memory),
        game_directory=layout.root,
        version=args.version_id,
        username=args.username,
    )
    process = await GameLauncher(settings).launch(options)
    return await process.wait()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    layout = GameLayout(args.root)
    try:
        settings = LauncherSettings.load(args.settings)
        if args.command == "install":
            complete = asyncio.run(install(layout, settings, [args.version_id], args.strict, args.refresh))
            return 0 if complete else 1
        return asyncio.run(launch(layout, settings, args))
    except LauncherError as e:
        logger.error("%s", e)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
