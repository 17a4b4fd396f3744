"""Player identity for offline launches."""

from .offline import OfflineAuthenticator

__all__ = ["OfflineAuthenticator"]
