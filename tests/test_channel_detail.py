"""
Tests for the channel detail resolver.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from channel_catalog.db.database import Channel
from channel_catalog.identification.channel_detail import ChannelDetailResolver
from channel_catalog.identification.models import ChannelSource


def _youtube(channels=None):
    youtube = MagicMock()
    youtube.get_channel_details = AsyncMock(return_value=channels or [])
    return youtube


@pytest.fixture
def catalog_db(db):
    db.add_guitar_term("guitar")
    db.add_channel(Channel("UC_local", "Local Guitar Hub", "Lessons and gear"))
    db.add_channel(Channel("UC_local_cooking", "Kitchen", "Recipes"))
    return db


class TestChannelDetailResolver:
    def test_requires_collaborators(self, db):
        with pytest.raises(ValueError):
            ChannelDetailResolver(None, _youtube())
        with pytest.raises(ValueError):
            ChannelDetailResolver(db, None)

    @pytest.mark.asyncio
    async def test_local_hit_skips_remote(self, catalog_db):
        youtube = _youtube()
        resolver = ChannelDetailResolver(catalog_db, youtube)

        results = await resolver.resolve(["UC_local"])

        assert len(results) == 1
        assert results[0].source is ChannelSource.LOCAL
        assert results[0].is_guitar_channel is True
        assert results[0].channel.title == "Local Guitar Hub"
        youtube.get_channel_details.assert_not_called()

    @pytest.mark.asyncio
    async def test_only_missing_ids_fetched_remotely(self, catalog_db):
        youtube = _youtube([Channel("UC_remote", "Remote Riffs", "guitar covers")])
        resolver = ChannelDetailResolver(catalog_db, youtube)

        results = await resolver.resolve(["UC_local", "UC_remote"])

        youtube.get_channel_details.assert_awaited_once_with(["UC_remote"])
        by_id = {r.channel_id: r for r in results}
        assert by_id["UC_local"].source is ChannelSource.LOCAL
        assert by_id["UC_remote"].source is ChannelSource.REMOTE
        assert by_id["UC_remote"].is_guitar_channel is True

    @pytest.mark.asyncio
    async def test_duplicate_ids_collapse(self, catalog_db):
        youtube = _youtube([Channel("UC_remote", "Remote", "")])
        resolver = ChannelDetailResolver(catalog_db, youtube)

        results = await resolver.resolve(["UC_remote", "UC_local", "UC_remote", "UC_local"])

        youtube.get_channel_details.assert_awaited_once_with(["UC_remote"])
        assert sorted(r.channel_id for r in results) == ["UC_local", "UC_remote"]

    @pytest.mark.asyncio
    async def test_unknown_ids_absent(self, catalog_db):
        youtube = _youtube([])
        resolver = ChannelDetailResolver(catalog_db, youtube)

        results = await resolver.resolve(["UC_nowhere"])

        assert results == []

    @pytest.mark.asyncio
    async def test_classifies_non_guitar_channels(self, catalog_db):
        youtube = _youtube([Channel("UC_remote", "Travel Vlog", "Beaches")])
        resolver = ChannelDetailResolver(catalog_db, youtube)

        results = await resolver.resolve(["UC_local_cooking", "UC_remote"])

        assert all(r.is_guitar_channel is False for r in results)

    @pytest.mark.asyncio
    async def test_empty_input(self, catalog_db):
        youtube = _youtube()
        resolver = ChannelDetailResolver(catalog_db, youtube)

        assert await resolver.resolve([]) == []
        youtube.get_channel_details.assert_not_called()

    @pytest.mark.asyncio
    async def test_remote_error_propagates(self, catalog_db):
        youtube = _youtube()
        youtube.get_channel_details.side_effect = RuntimeError("network down")
        resolver = ChannelDetailResolver(catalog_db, youtube)

        with pytest.raises(RuntimeError, match="network down"):
            await resolver.resolve(["UC_remote"])


class TestResolveOne:
    @pytest.mark.asyncio
    async def test_returns_matching_identification(self, catalog_db):
        resolver = ChannelDetailResolver(catalog_db, _youtube())

        result = await resolver.resolve_one("UC_local")

        assert result.channel_id == "UC_local"
        assert result.source is ChannelSource.LOCAL

    @pytest.mark.asyncio
    async def test_ignores_unrequested_remote_results(self, catalog_db):
        youtube = _youtube([Channel("UC_other", "Other", "guitar")])
        resolver = ChannelDetailResolver(catalog_db, youtube)

        assert await resolver.resolve_one("UC_remote") is None

    @pytest.mark.asyncio
    async def test_unknown_channel(self, catalog_db):
        resolver = ChannelDetailResolver(catalog_db, _youtube())

        assert await resolver.resolve_one("UC_nowhere") is None
