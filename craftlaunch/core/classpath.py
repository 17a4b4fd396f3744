"""Classpath discovery rules."""

import os
from pathlib import Path
from typing import Collection, FrozenSet, List, NamedTuple, Optional, Sequence

from ..layout import GameLayout

JAR_SUFFIX = ".jar"


class JarQuirk(NamedTuple):
    """Jars whose name contains ``substring`` are only kept for ``allowed_versions``."""
    substring: str
    allowed_versions: FrozenSet[str]

    def excludes(self, version_id: str, file_name: str) -> bool:
        return self.substring in file_name and version_id not in self.allowed_versions


# LWJGL 3.2.1 ships next to 3.2.2 in later versions' library sets.
CLASSPATH_QUIRKS: Sequence[JarQuirk] = (
    JarQuirk("3.2.1", frozenset({"1.14", "1.14.1", "1.14.2", "1.14.3"})),
)

# Loaders whose profiles run on the base client jar.
BASE_JAR_LOADERS: Sequence[str] = ("fabric", "quilt")


def is_excluded(version_id: str, file_name: str,
                quirks: Sequence[JarQuirk] = CLASSPATH_QUIRKS) -> bool:
    return any(quirk.excludes(version_id, file_name) for quirk in quirks)


def find_jars(libraries_dir: Path, required: Collection[str], version_id: str,
              quirks: Sequence[JarQuirk] = CLASSPATH_QUIRKS) -> List[Path]:
    """Every jar under ``libraries_dir`` whose file name is required.

    The walk is sorted so the same tree always yields the same order.
    """
    jars = []
    for dirpath, dirnames, filenames in os.walk(libraries_dir):
        dirnames.sort()
        for file_name in sorted(filenames):
            if not file_name.endswith(JAR_SUFFIX) or file_name not in required:
                continue
            if is_excluded(version_id, file_name, quirks):
                continue
            jars.append(Path(dirpath) / file_name)
    return jars


def game_jar(layout: GameLayout, base_id: str, overlay_id: Optional[str] = None) -> Path:
    """Client jar to put last on the classpath."""
    if overlay_id is None or any(loader in overlay_id for loader in BASE_JAR_LOADERS):
        return layout.version_jar(base_id)
    return layout.version_jar(overlay_id)
