"""Offline player identity for Minecraft."""

import hashlib
import json
import logging
import uuid
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


class OfflineAuthenticator:
    """Offline mode authenticator with username only."""

    @staticmethod
    def offline_uuid(username: str) -> str:
        """UUID the game derives for an offline player name."""
        digest = hashlib.md5(f"OfflinePlayer:{username}".encode("utf-8")).digest()
        return str(uuid.UUID(bytes=digest, version=3))

    @classmethod
    def lookup_uuid(cls, usercache: Optional[Path], username: str) -> str:
        """UUID of a player from the game's user cache, or its offline UUID."""
        if usercache is not None and usercache.is_file():
            try:
                with open(usercache, 'r', encoding='utf-8') as f:
                    entries = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Unreadable user cache %s: %s", usercache, e)
                entries = []
            for entry in entries if isinstance(entries, list) else []:
                if isinstance(entry, dict) and entry.get("name") == username and entry.get("uuid"):
                    return entry["uuid"]

        logger.info("No cached user %s, using offline identity", username)
        return cls.offline_uuid(username)

    @classmethod
    async def authenticate(cls, username: str, usercache: Optional[Path] = None) -> Dict[str, Any]:
        """Authenticate offline with given username."""
        if not username or len(username) > 16:
            raise ValueError("Invalid username for offline mode")

        player_uuid = cls.lookup_uuid(usercache, username)
        return {
            "id": player_uuid,
            "name": username,
            "type": "offline",
            "access_token": player_uuid  # Offline sessions reuse the UUID
        }
