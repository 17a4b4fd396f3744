"""On-disk layout of a game root directory."""

from pathlib import Path
from typing import Union


class GameLayout:
    """Derives every path the launcher reads or writes from one root."""

    CACHE = "cache"
    VERSIONS = "versions"
    ASSETS = "assets"
    LIBRARIES = "libraries"
    NATIVES = "natives"

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def __repr__(self) -> str:
        return f"<GameLayout {self.root}>"

    def __eq__(self, other) -> bool:
        return isinstance(other, GameLayout) and self.root == other.root

    def __hash__(self) -> int:
        return hash(self.root)

    @property
    def cache_json_dir(self) -> Path:
        return self.root / self.CACHE / "json"

    @property
    def manifest_file(self) -> Path:
        return self.cache_json_dir / "version_manifest.json"

    @property
    def versions_dir(self) -> Path:
        return self.root / self.VERSIONS

    def version_dir(self, version_id: str) -> Path:
        return self.versions_dir / version_id

    def version_json(self, version_id: str) -> Path:
        return self.version_dir(version_id) / f"{version_id}.json"

    def version_jar(self, version_id: str) -> Path:
        return self.version_dir(version_id) / f"{version_id}.jar"

    @property
    def assets_dir(self) -> Path:
        return self.root / self.ASSETS

    @property
    def asset_indexes_dir(self) -> Path:
        return self.assets_dir / "indexes"

    @property
    def asset_objects_dir(self) -> Path:
        return self.assets_dir / "objects"

    def asset_index(self, version_id: str) -> Path:
        return self.asset_indexes_dir / f"{version_id}.json"

    def cached_asset_index(self, version_id: str) -> Path:
        return self.cache_json_dir / f"{version_id}.json"

    @property
    def libraries_dir(self) -> Path:
        return self.root / self.LIBRARIES

    @property
    def natives_scratch_dir(self) -> Path:
        return self.root / self.NATIVES

    def natives_dir(self, version_id: str) -> Path:
        return self.natives_scratch_dir / version_id

    @property
    def launcher_profiles(self) -> Path:
        return self.root / "launcher_profiles.json"

    @property
    def usercache(self) -> Path:
        return self.root / "usercache.json"

    @property
    def options_file(self) -> Path:
        return self.root / "options.txt"
