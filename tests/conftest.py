"""Shared fixtures: an in-memory distribution server and a game root."""

import hashlib
import io
import json
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from craftlaunch.config import LauncherSettings
from craftlaunch.errors import NetworkError
from craftlaunch.layout import GameLayout
from craftlaunch.utils.platform import OperatingSystem, Platform

SETTINGS = LauncherSettings()
META = "https://piston-meta.test"
DATA = "https://piston-data.test"
LIBS = "https://libraries.test"

LEGACY_ARGUMENTS = (
    "--username ${auth_player_name} --version ${version_name} --gameDir ${game_directory} "
    "--assetsDir ${assets_root} --assetIndex ${assets_index_name} --uuid ${auth_uuid} "
    "--accessToken ${auth_access_token} --userType ${user_type} --versionType ${version_type}"
)


def sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def make_zip(files: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def library(name: str, with_artifact: bool = True, natives: Optional[Dict[str, str]] = None,
            classifiers: Optional[Dict[str, Dict[str, Any]]] = None) -> Dict[str, Any]:
    group, artifact, version = name.split(":")[:3]
    path = f"{group.replace('.', '/')}/{artifact}/{version}/{artifact}-{version}.jar"
    downloads: Dict[str, Any] = {}
    if with_artifact:
        downloads["artifact"] = {"path": path, "url": f"{LIBS}/{path}"}
    if classifiers:
        downloads["classifiers"] = classifiers
    entry: Dict[str, Any] = {"name": name, "downloads": downloads}
    if natives:
        entry["natives"] = natives
        entry["extract"] = {"exclude": ["META-INF/"]}
    return entry


class FakeServer:
    """Serves registered bytes by URL and records every request."""

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.requests: List[str] = []
        self.versions: List[Dict[str, Any]] = []
        self.failing: set = set()
        self.publish_manifest()

    # AsyncHTTPClient interface

    async def download(self, url: str, dest: Path) -> Path:
        self.requests.append(url)
        if url in self.failing or url not in self.files:
            raise NetworkError(url, "404 Not Found")
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(self.files[url])
        return dest

    # Registration

    def add(self, url: str, data: bytes) -> Dict[str, Any]:
        self.files[url] = data
        return {"url": url, "sha1": sha1(data), "size": len(data)}

    def add_json(self, url: str, document: Any) -> Dict[str, Any]:
        return self.add(url, json.dumps(document).encode("utf-8"))

    def publish_manifest(self):
        self.add_json(SETTINGS.manifest_url, {
            "latest": {"release": "1.12.2", "snapshot": "1.12.2"},
            "versions": self.versions,
        })

    def add_version(self, version_id: str, version_type: str = "release",
                    libraries: Optional[List[Dict[str, Any]]] = None,
                    assets: Optional[Dict[str, bytes]] = None,
                    **overrides) -> Dict[str, Any]:
        """Register a complete version and list it in the manifest."""
        if libraries is None:
            libraries = [
                library("org.lwjgl.lwjgl:lwjgl:2.9.4"),
                library("com.mojang:brigadier:1.0.17"),
                library(
                    "org.lwjgl.lwjgl:lwjgl-platform:2.9.4",
                    with_artifact=False,
                    natives={"linux": "natives-linux", "windows": "natives-windows-${arch}"},
                    classifiers={"natives-linux": {
                        "path": "org/lwjgl/lwjgl/lwjgl-platform/2.9.4/lwjgl-platform-2.9.4-natives-linux.jar",
                        "url": f"{LIBS}/natives/{version_id}/lwjgl-platform-2.9.4-natives-linux.jar",
                    }},
                ),
            ]
        for lib in libraries:
            downloads = lib.get("downloads", {})
            artifact = downloads.get("artifact")
            if artifact:
                artifact.update(self.add(artifact["url"], f"jar {lib['name']}".encode()))
            for native in downloads.get("classifiers", {}).values():
                native.update(self.add(native["url"], make_zip({
                    "liblwjgl.so": b"\x7fELF",
                    "META-INF/MANIFEST.MF": b"Manifest-Version: 1.0",
                })))

        if assets is None:
            assets = {"minecraft/sounds/step.ogg": b"step", "icons/icon.png": b"icon", "copy/step.ogg": b"step"}
        objects = {}
        for logical_path, content in assets.items():
            digest = sha1(content)
            self.add(f"{SETTINGS.resource_url}/{digest[:2]}/{digest}", content)
            objects[logical_path] = {"hash": digest, "size": len(content)}
        index = self.add_json(f"{META}/indexes/{version_id}.json", {"objects": objects})

        metadata = {
            "id": version_id,
            "type": version_type,
            "mainClass": "net.minecraft.client.main.Main",
            "downloads": {"client": self.add(f"{DATA}/{version_id}/client.jar", f"client {version_id}".encode())},
            "assetIndex": dict(index, id=version_id),
            "libraries": libraries,
            "minecraftArguments": LEGACY_ARGUMENTS,
        }
        metadata.update(overrides)
        descriptor = self.add_json(f"{META}/v1/{version_id}.json", metadata)
        self.versions.append({"id": version_id, "type": version_type,
                              "url": descriptor["url"], "sha1": descriptor["sha1"]})
        self.publish_manifest()
        return metadata


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def layout(tmp_path):
    return GameLayout(tmp_path / "minecraft")


@pytest.fixture
def linux():
    return Platform(OperatingSystem.LINUX, "x86_64", "64", "6.1")


def write_json(path: Path, document: Any):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document), encoding="utf-8")


def touch(path: Path, content: bytes = b"") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path
