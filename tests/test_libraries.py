"""Tests for libraries and natives."""

import pytest

from craftlaunch.utils.platform import OperatingSystem, Platform
from craftlaunch.versions.download_manager import DownloadManager
from craftlaunch.versions.libraries import LibraryResolver, extract_natives, is_defective
from craftlaunch.versions.models import VersionContext, VersionLibrary, VersionMetadata

from conftest import LIBS, library, make_zip, touch


def context_for(server, layout, version_id, libraries):
    metadata = server.add_version(version_id, libraries=libraries)
    return VersionContext(version_id=version_id, layout=layout, metadata=VersionMetadata(**metadata))


def native_library(version_id, url=None, classifier="natives-linux", version="2.9.4", rules=None):
    entry = library(
        f"org.lwjgl.lwjgl:lwjgl-platform:{version}",
        with_artifact=False,
        natives={"linux": "natives-linux", "windows": "natives-windows-${arch}"},
        classifiers={classifier: {
            "path": f"org/lwjgl/lwjgl-platform-{version}-{classifier}.jar",
            "url": url or f"{LIBS}/natives/{version_id}/lwjgl-platform-{version}-{classifier}.jar",
        }},
    )
    if rules is not None:
        entry["rules"] = rules
    return entry


@pytest.mark.asyncio
async def test_resolve_libraries(server, layout, linux):
    context = context_for(server, layout, "1.12.2", [
        library("org.lwjgl.lwjgl:lwjgl:2.9.4"),
        native_library("1.12.2"),
    ])

    report = await LibraryResolver(DownloadManager(server), linux).resolve_libraries(context)

    # Only entries with an artifact are libraries.
    assert report.succeeded == ["org.lwjgl.lwjgl:lwjgl:2.9.4"]
    jar = layout.libraries_dir / "org" / "lwjgl" / "lwjgl" / "lwjgl" / "2.9.4" / "lwjgl-2.9.4.jar"
    assert jar.is_file()


@pytest.mark.asyncio
async def test_resolve_natives_extracts_and_removes_archive(server, layout, linux):
    context = context_for(server, layout, "1.12.2", [native_library("1.12.2")])
    resolver = LibraryResolver(DownloadManager(server), linux)

    report = await resolver.resolve_natives(context)

    natives = layout.natives_dir("1.12.2")
    assert report.complete and len(report.succeeded) == 1
    assert (natives / "liblwjgl.so").read_bytes() == b"\x7fELF"
    assert not (natives / "META-INF").exists()
    assert not list(layout.natives_scratch_dir.glob("*.jar"))

    server.requests.clear()
    again = await resolver.resolve_natives(context)
    assert server.requests == []
    assert again.skipped == ["org.lwjgl.lwjgl:lwjgl-platform:2.9.4"]


@pytest.mark.asyncio
async def test_natives_for_other_platform_are_ignored(server, layout):
    context = context_for(server, layout, "1.12.2", [native_library("1.12.2", classifier="natives-osx")])
    windows = Platform(OperatingSystem.WINDOWS, "x86_64", "64")

    report = await LibraryResolver(DownloadManager(server), windows).resolve_natives(context)

    assert report.total == 0


@pytest.mark.asyncio
async def test_natives_follow_library_rules(server, layout, linux):
    osx_only = [{"action": "allow", "os": {"name": "osx"}}]
    not_osx = [{"action": "allow"}, {"action": "disallow", "os": {"name": "osx"}}]
    context = context_for(server, layout, "1.12.2", [
        native_library("1.12.2", version="2.9.2-nightly-20140822", rules=osx_only),
        native_library("1.12.2", rules=not_osx),
    ])
    resolver = LibraryResolver(DownloadManager(server), linux)

    report = await resolver.resolve_natives(context)

    assert report.succeeded == ["org.lwjgl.lwjgl:lwjgl-platform:2.9.4"]
    assert not any("2.9.2-nightly" in url for url in server.requests)


def test_disallowed_library_has_no_native():
    lib = VersionLibrary(**native_library("1.12.2", rules=[{"action": "allow", "os": {"name": "osx"}}]))
    linux = Platform(OperatingSystem.LINUX, "x86_64", "64")

    assert lib.get_classifier(linux.classifier_keys(lib.natives)) is not None
    assert LibraryResolver(None, linux).native_library(lib) is None


@pytest.mark.asyncio
async def test_defective_channel_is_discarded(server, layout, linux):
    url = f"{LIBS}/nightly/lwjgl-platform-2.9.4-nightly-natives-linux.jar"
    context = context_for(server, layout, "1.8", [native_library("1.8", url=url)])

    report = await LibraryResolver(DownloadManager(server), linux).resolve_natives(context)

    assert report.complete
    assert not (layout.natives_dir("1.8") / "liblwjgl.so").exists()
    assert not list(layout.natives_scratch_dir.glob("*.jar"))


def test_defective_channel_rule():
    assert is_defective("1.8", "https://libraries.test/nightly/a.jar")
    assert not is_defective("1.8.9", "https://libraries.test/nightly/a.jar")
    assert not is_defective("1.8", "https://libraries.test/stable/a.jar")


@pytest.mark.asyncio
async def test_failed_native_is_reported(server, layout, linux):
    context = context_for(server, layout, "1.12.2", [native_library("1.12.2")])
    server.failing.add(context.metadata.libraries[0].downloads.classifiers["natives-linux"].url)

    report = await LibraryResolver(DownloadManager(server), linux).resolve_natives(context)

    assert not report.complete


def test_classifier_selection_order():
    lib = VersionLibrary(**library(
        "org.lwjgl:lwjgl:3.3.1",
        with_artifact=False,
        natives={"windows": "natives-windows-${arch}"},
        classifiers={
            "natives-windows": {"url": f"{LIBS}/generic.jar", "path": "generic.jar"},
            "natives-windows-64": {"url": f"{LIBS}/64.jar", "path": "64.jar"},
        },
    ))
    windows64 = Platform(OperatingSystem.WINDOWS, "x86_64", "64")
    windows32 = Platform(OperatingSystem.WINDOWS, "x86", "32")

    assert LibraryResolver(None, windows64).native_library(lib).path == "64.jar"
    assert LibraryResolver(None, windows32).native_library(lib).path == "generic.jar"


def test_extract_natives_excludes(tmp_path):
    archive = touch(tmp_path / "bundle.jar", make_zip({
        "a.dll": b"a",
        "skip/b.dll": b"b",
        "META-INF/MANIFEST.MF": b"m",
    }))

    count = extract_natives(archive, tmp_path / "out", exclude=["skip/"])

    assert count == 1
    assert (tmp_path / "out" / "a.dll").is_file()
