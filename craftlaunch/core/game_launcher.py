"""Game launcher for Minecraft."""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel

from ..auth.offline import OfflineAuthenticator
from ..config import LauncherSettings
from ..errors import MalformedMetadataError, MissingAssemblyError, VersionNotFoundError
from ..layout import GameLayout
from ..utils.platform import Platform
from ..versions.manager import read_document
from ..versions.models import MavenCoordinate, VersionMetadata
from .classpath import find_jars, game_jar, is_excluded
from .process import GameProcess, OutputCallback, ProcessLauncher

logger = logging.getLogger(__name__)

BASE_VERSION_PATTERN = re.compile(r"\b1\.\d+(?:\.\d+)?\b")
HEAP_DUMP_FLAG = "-XX:HeapDumpPath=MojangTricksIntelDriversForPerformance_javaw.exe_minecraft.exe.heapdump"

GameArgument = Union[str, Dict[str, Any]]


class MemoryOptions(BaseModel):
    min: str = "1G"
    max: str = "2G"


class LaunchOptions(BaseModel):
    memory: MemoryOptions = MemoryOptions()
    game_directory: Path
    version: str
    username: str
    resolution_width: int = 856
    resolution_height: int = 482


class LaunchPlan(BaseModel):
    """Everything needed to start the game, never written to disk."""
    executable: str
    version_id: str
    overlay_id: Optional[str] = None
    main_class: str
    classpath: List[Path]
    arguments: List[str]
    working_directory: Path
    natives_directory: Path

    @property
    def command(self) -> List[str]:
        return [self.executable, *self.arguments]


def split_version(version: str) -> Tuple[str, Optional[str]]:
    """Base version and overlay id of a possibly decorated version string."""
    match = BASE_VERSION_PATTERN.search(version)
    if match is None:
        raise VersionNotFoundError(version, f"No base version in '{version}'")
    base = match.group(0)
    return base, (version if version != base else None)


def library_file_name(name: str) -> str:
    """Jar file name of a maven coordinate, ``artifact-version[-classifier].jar``."""
    try:
        return MavenCoordinate.parse(name).file_name
    except ValueError as e:
        raise MalformedMetadataError(name, e) from e


def game_arguments(metadata: VersionMetadata) -> List[GameArgument]:
    if metadata.minecraftArguments:
        return metadata.minecraftArguments.split(" ")
    if metadata.arguments is not None:
        return list(metadata.arguments.game)
    return []


def flatten_arguments(arguments: List[GameArgument], platform: Platform,
                      features: Optional[Dict[str, bool]] = None) -> List[str]:
    """Plain tokens of an argument template, conditional entries resolved."""
    tokens = []
    for argument in arguments:
        if isinstance(argument, str):
            if argument:
                tokens.append(argument)
            continue
        if not platform.allows(argument.get("rules"), features):
            continue
        value = argument.get("value", [])
        tokens.extend([value] if isinstance(value, str) else value)
    return tokens


def substitute(tokens: List[str], fields: Dict[str, str]) -> List[str]:
    """Replace tokens that are exactly a known placeholder, keep the others."""
    return [fields.get(token, token) for token in tokens]


class LaunchPlanner:
    """Builds the command line of an installed version. Never downloads."""

    def __init__(self, settings: Optional[LauncherSettings] = None,
                 platform: Optional[Platform] = None):
        self.settings = settings or LauncherSettings()
        self.platform = platform or Platform.current()

    def load_metadata(self, layout: GameLayout, version_id: str) -> VersionMetadata:
        return read_document(VersionMetadata, layout.version_json(version_id))

    def placeholders(self, layout: GameLayout, options: LaunchOptions, version_id: str,
                     metadata: VersionMetadata, player_uuid: str) -> Dict[str, str]:
        assets = str(layout.assets_dir)
        return {
            "${auth_access_token}": player_uuid,
            "${auth_session}": player_uuid,
            "${auth_player_name}": options.username,
            "${auth_uuid}": player_uuid,
            "${auth_xuid}": player_uuid,
            "${clientid}": player_uuid,
            "${user_properties}": "{}",
            "${user_type}": "mojang",
            "${version_name}": version_id,
            # Asset indexes are stored under the version id.
            "${assets_index_name}": version_id,
            "${game_directory}": str(layout.root),
            "${assets_root}": assets,
            "${game_assets}": assets,
            "${version_type}": metadata.type or "release",
            "${resolution_width}": str(options.resolution_width),
            "${resolution_height}": str(options.resolution_height),
            "${natives_directory}": str(layout.natives_dir(version_id)),
            "${launcher_name}": self.settings.launcher_name,
            "${launcher_version}": self.settings.launcher_version,
        }

    def build_launch_plan(self, options: LaunchOptions) -> LaunchPlan:
        layout = GameLayout(options.game_directory)
        base_id, overlay_id = split_version(options.version)

        base = self.load_metadata(layout, base_id)
        required = [
            Path(lib.downloads.artifact.path).name
            for lib in base.libraries
            if lib.downloads and lib.downloads.artifact and lib.downloads.artifact.path
        ]
        main_class = base.mainClass
        arguments = game_arguments(base)

        if overlay_id is not None:
            overlay = self.load_metadata(layout, overlay_id)
            required.extend(library_file_name(lib.name) for lib in overlay.libraries)
            main_class = overlay.mainClass or main_class
            if overlay.arguments is not None:
                arguments = arguments + list(overlay.arguments.game)
            elif overlay.minecraftArguments:
                arguments = overlay.minecraftArguments.split(" ")

        if not main_class:
            raise MalformedMetadataError(layout.version_json(overlay_id or base_id), "no mainClass")

        jar = game_jar(layout, base_id, overlay_id)
        if not jar.is_file():
            raise MissingAssemblyError(jar, "game jar")

        classpath = find_jars(layout.libraries_dir, set(required), base_id)
        found = {path.name for path in classpath}
        missing = [name for name in required if name not in found and not is_excluded(base_id, name)]
        if missing:
            logger.error("%d required libraries not found: %s", len(missing), ", ".join(missing))
            raise MissingAssemblyError(layout.libraries_dir / missing[0], "library")
        classpath.append(jar)

        if overlay_id is not None and layout.options_file.exists():
            logger.info("Removing %s left by another version", layout.options_file)
            layout.options_file.unlink()

        player_uuid = OfflineAuthenticator.lookup_uuid(layout.usercache, options.username)
        fields = self.placeholders(layout, options, base_id, base, player_uuid)
        natives = layout.natives_dir(base_id)

        jvm_args = [
            f"-Djava.library.path={natives}",
            f"-Xmx{options.memory.max}",
            f"-Xms{options.memory.min}",
            HEAP_DUMP_FLAG,
            "-cp",
            os.pathsep.join(str(path) for path in classpath),
            main_class,
        ]
        tokens = substitute(flatten_arguments(arguments, self.platform), fields)

        return LaunchPlan(
            executable=self.settings.java_executable,
            version_id=base_id,
            overlay_id=overlay_id,
            main_class=main_class,
            classpath=classpath,
            arguments=jvm_args + tokens,
            working_directory=layout.root,
            natives_directory=natives,
        )


class GameLauncher:
    """Plans and starts the game for an installed version."""

    def __init__(self, settings: Optional[LauncherSettings] = None,
                 planner: Optional[LaunchPlanner] = None,
                 process_launcher: Optional[ProcessLauncher] = None):
        self.settings = settings or LauncherSettings()
        self.planner = planner or LaunchPlanner(self.settings)
        self.process_launcher = process_launcher or ProcessLauncher()

    @staticmethod
    def create_profile(layout: GameLayout):
        """Create an empty launcher_profiles.json, the game expects one."""
        if not layout.launcher_profiles.exists():
            layout.root.mkdir(parents=True, exist_ok=True)
            with open(layout.launcher_profiles, 'w', encoding='utf-8') as f:
                json.dump({"profiles": {}}, f)

    async def launch(self, options: LaunchOptions,
                     on_stdout: Optional[OutputCallback] = None,
                     on_stderr: Optional[OutputCallback] = None) -> GameProcess:
        plan = self.planner.build_launch_plan(options)
        self.create_profile(GameLayout(options.game_directory))
        logger.info("Starting Minecraft %s", options.version)
        return await self.process_launcher.spawn(
            plan.executable, plan.arguments, plan.working_directory, on_stdout, on_stderr)
