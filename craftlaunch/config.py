"""Launcher settings."""

import json
from pathlib import Path
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import MalformedMetadataError


class LauncherSettings(BaseModel):
    """Settings shared by every pipeline step.

    Defaults match the official distribution endpoints. A JSON file with the
    same keys can override any of them, see :meth:`load`.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    manifest_url: str = "https://launchermeta.mojang.com/mc/game/version_manifest.json"
    resource_url: str = "https://resources.download.minecraft.net"

    # Servers reset connections past a small number of simultaneous transfers.
    max_connections: int = 2
    timeout: float = 10.0
    verify_existing: bool = True
    version_types: Tuple[str, ...] = ("release",)

    java_executable: str = "java"
    launcher_name: str = "craftlaunch"
    launcher_version: str = "0.1.0"

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "LauncherSettings":
        """Load settings from a JSON file, falling back to defaults if absent."""
        if path is None or not Path(path).exists():
            return cls()

        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise MalformedMetadataError(path, e) from e

        try:
            return cls(**data)
        except (TypeError, ValidationError) as e:
            raise MalformedMetadataError(path, e) from e
