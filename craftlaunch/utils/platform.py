"""Platform descriptor used for classifier and rule matching."""

import platform
import re
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple


class OperatingSystem(str, Enum):
    WINDOWS = "windows"
    LINUX = "linux"
    OSX = "osx"
    UNKNOWN = ""

    @classmethod
    def from_system(cls, system: str) -> "OperatingSystem":
        return {
            "windows": cls.WINDOWS,
            "linux": cls.LINUX,
            "darwin": cls.OSX,
        }.get(system.lower(), cls.UNKNOWN)


_ARCH_MAP = {
    "i386": "x86",
    "i686": "x86",
    "x86": "x86",
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "arm64": "arm64",
    "aarch64": "arm64",
    "armv7l": "arm32",
    "armv6l": "arm32",
}


class Platform:
    """Operating system, architecture and pointer size of a host."""

    def __init__(self, os: OperatingSystem, arch: str, bits: str, os_version: str = ""):
        self.os = os
        self.arch = arch
        self.bits = bits
        self.os_version = os_version

    def __repr__(self) -> str:
        return f"<Platform {self.os.value}/{self.arch} {self.bits}bit>"

    @classmethod
    @lru_cache(maxsize=None)
    def current(cls) -> "Platform":
        """Describe the running host, resolved once per process."""
        machine = platform.machine().lower()
        raw_bits = platform.architecture()[0]
        bits = "64" if raw_bits == "64bit" else "32" if raw_bits == "32bit" else ""
        return cls(
            OperatingSystem.from_system(platform.system()),
            _ARCH_MAP.get(machine, machine),
            bits,
            platform.version(),
        )

    def classifier_keys(self, natives: Optional[Dict[str, str]] = None) -> Tuple[str, ...]:
        """Native classifier keys to try, most specific first."""
        keys: List[str] = []
        if natives and self.os.value in natives:
            keys.append(natives[self.os.value].replace("${arch}", self.bits))

        os_name = self.os.value
        if self.arch in ("arm64", "arm32"):
            keys.append(f"natives-{os_name}-{self.arch}")
        if self.bits:
            keys.append(f"natives-{os_name}-{self.bits}")
        keys.append(f"natives-{os_name}")

        # Keep order, drop repeats.
        return tuple(dict.fromkeys(keys))

    def matches_os(self, rule_os: Dict[str, Any]) -> bool:
        name = rule_os.get("name")
        if name is not None and name != self.os.value:
            return False
        arch = rule_os.get("arch")
        if arch is not None and arch != self.arch:
            return False
        version = rule_os.get("version")
        if version is not None and re.search(version, self.os_version) is None:
            return False
        return True

    def allows(self, rules: Optional[List[Dict[str, Any]]], features: Optional[Dict[str, bool]] = None) -> bool:
        """Evaluate a list of allow/disallow rules, the last matching rule wins."""
        if not rules:
            return True
        features = features or {}
        allowed = False
        for rule in rules:
            rule_os = rule.get("os")
            if rule_os is not None and not self.matches_os(rule_os):
                continue
            rule_features = rule.get("features")
            if rule_features is not None and any(
                bool(features.get(name)) != expected for name, expected in rule_features.items()
            ):
                continue
            allowed = rule.get("action") == "allow"
        return allowed
