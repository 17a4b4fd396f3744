"""Tests for auth module."""

import pytest
from craftlaunch.auth.offline import OfflineAuthenticator

from conftest import write_json


@pytest.mark.asyncio
async def test_offline_auth():
    """Test offline authentication."""
    profile = await OfflineAuthenticator.authenticate("testuser")
    assert profile["name"] == "testuser"
    assert profile["type"] == "offline"
    assert profile["id"] == OfflineAuthenticator.offline_uuid("testuser")


@pytest.mark.asyncio
@pytest.mark.parametrize("username", ["", "a" * 17])
async def test_offline_auth_rejects_invalid_names(username):
    with pytest.raises(ValueError):
        await OfflineAuthenticator.authenticate(username)


def test_offline_uuid_is_stable_version_3():
    first = OfflineAuthenticator.offline_uuid("Steve")
    assert first == OfflineAuthenticator.offline_uuid("Steve")
    assert first != OfflineAuthenticator.offline_uuid("Alex")
    assert first[14] == "3"


def test_lookup_uuid_from_usercache(tmp_path):
    usercache = tmp_path / "usercache.json"
    write_json(usercache, [{"name": "Steve", "uuid": "cached-uuid", "expiresOn": "2030-01-01"}])

    assert OfflineAuthenticator.lookup_uuid(usercache, "Steve") == "cached-uuid"
    assert OfflineAuthenticator.lookup_uuid(usercache, "Alex") == OfflineAuthenticator.offline_uuid("Alex")


def test_lookup_uuid_ignores_broken_usercache(tmp_path):
    usercache = tmp_path / "usercache.json"
    usercache.write_text("{broken", encoding="utf-8")

    assert OfflineAuthenticator.lookup_uuid(usercache, "Steve") == OfflineAuthenticator.offline_uuid("Steve")
