"""Launcher error types."""

from pathlib import Path
from typing import Optional, Sequence, Union


class LauncherError(Exception):
    """Base class for every error raised by the launcher."""


class VersionNotFoundError(LauncherError):
    """The requested version id is absent from the manifest."""

    def __init__(self, version_id: str, reason: Optional[str] = None):
        self.version_id = version_id
        super().__init__(reason or f"Version '{version_id}' not found in manifest")


class NetworkError(LauncherError):
    """A transfer failed."""

    def __init__(self, url: str, cause: Union[BaseException, str, None] = None):
        self.url = url
        self.cause = cause
        message = f"Failed to download {url}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class MissingAssemblyError(LauncherError):
    """A launch was attempted before the required files exist on disk."""

    def __init__(self, path: Path, what: str = "file"):
        self.path = Path(path)
        super().__init__(f"Missing {what}: {self.path} (install the version first)")


class MalformedMetadataError(LauncherError):
    """A document does not have the expected shape."""

    def __init__(self, source: Union[str, Path], detail: object = None):
        self.source = str(source)
        message = f"Malformed document {self.source}"
        if detail is not None:
            message += f": {detail}"
        super().__init__(message)


class IncompleteAssemblyError(LauncherError):
    """Some bulk downloads of a version failed."""

    def __init__(self, version_id: str, failures: Sequence[str]):
        self.version_id = version_id
        self.failures = list(failures)
        super().__init__(
            f"Version '{version_id}' is incomplete, {len(self.failures)} download(s) failed"
        )
