"""Data models for Minecraft versions."""

from pydantic import BaseModel, ConfigDict
from typing import Dict, List, Optional, Any, Union
from datetime import datetime

from ..layout import GameLayout


class VersionArtifact(BaseModel):
    path: Optional[str] = None
    sha1: Optional[str] = None
    size: Optional[Union[int, str]] = None
    url: Optional[str] = None

    @property
    def expected_size(self) -> Optional[int]:
        try:
            return int(self.size) if self.size is not None else None
        except ValueError:
            return None


class VersionDownloads(BaseModel):
    client: Optional[VersionArtifact] = None
    server: Optional[VersionArtifact] = None


class VersionLibraryExtractor(BaseModel):
    exclude: Optional[List[str]] = None


class VersionLibraryDownloads(BaseModel):
    artifact: Optional[VersionArtifact] = None
    classifiers: Optional[Dict[str, VersionArtifact]] = None


class VersionLibraryRulesOs(BaseModel):
    name: Optional[str] = None
    version: Optional[str] = None
    arch: Optional[str] = None


class VersionLibraryRules(BaseModel):
    action: str
    os: Optional[VersionLibraryRulesOs] = None
    features: Optional[Dict[str, bool]] = None


class MavenCoordinate(BaseModel):
    """``group:artifact:version[:classifier][@extension]``"""
    group: str
    artifact: str
    version: str
    classifier: Optional[str] = None
    extension: str = "jar"

    @classmethod
    def parse(cls, name: str) -> "MavenCoordinate":
        extension = "jar"
        if "@" in name:
            name, extension = name.split("@", 1)
        parts = name.split(":")
        if len(parts) < 3:
            raise ValueError(f"Invalid maven coordinate '{name}'")
        return cls(
            group=parts[0],
            artifact=parts[1],
            version=parts[2],
            classifier=parts[3] if len(parts) > 3 else None,
            extension=extension,
        )

    @property
    def file_name(self) -> str:
        suffix = f"-{self.classifier}" if self.classifier else ""
        return f"{self.artifact}-{self.version}{suffix}.{self.extension}"

    @property
    def path(self) -> str:
        return "/".join([*self.group.split("."), self.artifact, self.version, self.file_name])


class VersionLibrary(BaseModel):
    name: str
    downloads: Optional[VersionLibraryDownloads] = None
    rules: Optional[List[VersionLibraryRules]] = None
    extract: Optional[VersionLibraryExtractor] = None
    natives: Optional[Dict[str, str]] = None
    url: Optional[str] = None

    @property
    def coordinate(self) -> MavenCoordinate:
        return MavenCoordinate.parse(self.name)

    def get_artifact(self) -> Optional[VersionArtifact]:
        """Platform-independent jar, derived from the maven repository if needed."""
        if self.downloads and self.downloads.artifact and self.downloads.artifact.path:
            return self.downloads.artifact
        if self.downloads is None and self.url:
            path = self.coordinate.path
            return VersionArtifact(path=path, url=self.url.rstrip("/") + "/" + path)
        return None

    def get_classifier(self, keys) -> Optional[VersionArtifact]:
        """First native bundle matching one of the classifier keys."""
        if not self.downloads or not self.downloads.classifiers:
            return None
        for key in keys:
            native = self.downloads.classifiers.get(key)
            if native is not None and native.url:
                return native
        return None


class VersionAssetsUnion(BaseModel):
    id: Optional[str] = None
    sha1: Optional[str] = None
    size: Optional[int] = None
    totalSize: Optional[int] = None
    url: Optional[str] = None


class VersionArguments(BaseModel):
    game: List[Union[str, Dict[str, Any]]] = []
    jvm: List[Union[str, Dict[str, Any]]] = []


class VersionInfo(BaseModel):
    id: str
    type: str
    url: str
    time: Optional[datetime] = None
    releaseTime: Optional[datetime] = None
    sha1: Optional[str] = None
    complianceLevel: int = 0


class VersionManifest(BaseModel):
    latest: Dict[str, str] = {}
    versions: List[VersionInfo]


class VersionMetadata(BaseModel):
    """Parsed version.json data - flexible for all versions"""
    id: str
    type: Optional[str] = None
    time: Optional[datetime] = None
    releaseTime: Optional[datetime] = None
    inheritsFrom: Optional[str] = None
    minimumLauncherVersion: Optional[int] = None
    downloads: Optional[VersionDownloads] = None
    assetIndex: Optional[VersionAssetsUnion] = None
    assets: Optional[str] = None
    arguments: Optional[VersionArguments] = None
    minecraftArguments: Optional[str] = None
    libraries: List[VersionLibrary] = []
    mainClass: Optional[str] = None
    jar: Optional[str] = None

    @property
    def is_overlay(self) -> bool:
        return self.inheritsFrom is not None


class AssetObject(BaseModel):
    hash: str
    size: Optional[int] = None


class AssetIndex(BaseModel):
    objects: Dict[str, AssetObject] = {}
    virtual: Optional[bool] = None
    map_to_resources: Optional[bool] = None


class VersionContext(BaseModel):
    """Immutable state threaded through the pipeline steps of one version."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    version_id: str
    layout: GameLayout
    metadata: VersionMetadata
