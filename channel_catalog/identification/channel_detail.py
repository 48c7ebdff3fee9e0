"""
Resolve channel ids to classified channel records.

The local catalog is consulted first; only ids it does not list are
fetched from YouTube, in a single batch.
"""
import logging
from typing import Iterable, Optional

from ..db.database import Database
from .classifier import is_guitar_channel
from .models import ChannelIdentification, ChannelSource
from .youtube_client import YouTubeDataClient

logger = logging.getLogger(__name__)


class ChannelDetailResolver:
    """Looks up channels locally, falling back to the YouTube Data API."""

    def __init__(self, db: Database, youtube: YouTubeDataClient):
        if db is None:
            raise ValueError("db is required")
        if youtube is None:
            raise ValueError("youtube client is required")
        self.db = db
        self.youtube = youtube

    async def resolve(self, channel_ids: Iterable[str]) -> list[ChannelIdentification]:
        """Resolve channel ids to source-tagged, classified identifications.

        Steps:
            1. Load the guitar term dictionary
            2. Look up all ids in the local catalog
            3. Fetch the ids the catalog does not list from YouTube
            4. Classify every channel found

        Args:
            channel_ids: Ids to resolve. Duplicates collapse to one result.

        Returns:
            Local identifications followed by remote ones. Ids found in
            neither source are absent.
        """
        requested = list(dict.fromkeys(channel_ids))
        if not requested:
            return []

        terms = self.db.get_guitar_terms()

        identified: list[ChannelIdentification] = []

        stored_channels = self.db.get_channels(requested)
        for channel in stored_channels:
            identified.append(ChannelIdentification(
                channel_id=channel.channel_id,
                source=ChannelSource.LOCAL,
                is_guitar_channel=is_guitar_channel(terms, channel),
                channel=channel,
            ))

        stored_ids = {c.channel_id for c in stored_channels}
        missing_ids = [cid for cid in requested if cid not in stored_ids]

        if missing_ids:
            seen = set()
            for channel in await self.youtube.get_channel_details(missing_ids):
                if channel.channel_id not in missing_ids or channel.channel_id in seen:
                    continue
                seen.add(channel.channel_id)
                identified.append(ChannelIdentification(
                    channel_id=channel.channel_id,
                    source=ChannelSource.REMOTE,
                    is_guitar_channel=is_guitar_channel(terms, channel),
                    channel=channel,
                ))

        logger.info(
            "Resolved %d of %d channels (%d local, %d fetched from YouTube)",
            len(identified),
            len(requested),
            len(stored_channels),
            len(identified) - len(stored_channels),
        )
        return identified

    async def resolve_one(self, channel_id: str) -> Optional[ChannelIdentification]:
        """Resolve exactly one channel id, or return None if it is unknown."""
        for identification in await self.resolve([channel_id]):
            if identification.channel_id == channel_id:
                return identification
        return None
