"""
Fetch channel metadata from the YouTube Data API v3.

API errors are logged and re-raised; callers own retry policy.
"""
import logging
import os
from typing import Iterable, Optional

import httpx

from ..db.database import Channel
from .models import YouTubeChannelItem

logger = logging.getLogger(__name__)

YOUTUBE_API_KEY = os.environ.get("YOUTUBE_API_KEY", "")
YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"
BATCH_SIZE = 50  # YouTube API allows up to 50 IDs per request


class YouTubeDataClient:
    """Async client for the channels and videos endpoints."""

    def __init__(
        self,
        api_key: str = YOUTUBE_API_KEY,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30,
    ):
        self.api_key = api_key
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _get(self, resource: str, params: dict) -> dict:
        """GET a Data API resource and return the decoded JSON body."""
        try:
            resp = await self._client.get(
                f"{YOUTUBE_API_BASE}/{resource}",
                params={**params, "key": self.api_key},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 403:
                logger.error("YouTube API quota exceeded")
            else:
                logger.error("YouTube API error on %s: %s", resource, e)
            raise
        except httpx.TransportError as e:
            logger.error("YouTube API request to %s failed: %s", resource, e)
            raise
        return resp.json()

    async def get_channel_details(self, channel_ids: Iterable[str]) -> list[Channel]:
        """Fetch snippet and statistics for a batch of channel ids.

        Uses channels.list (1 quota unit per 50 channels). Ids YouTube does
        not know are simply absent from the result.

        Args:
            channel_ids: Channel ids to fetch. Duplicates are collapsed.

        Returns:
            List of Channel records built from the API response.
        """
        ids = list(dict.fromkeys(channel_ids))
        if not ids:
            return []

        channels = []
        for start in range(0, len(ids), BATCH_SIZE):
            batch = ids[start:start + BATCH_SIZE]
            data = await self._get(
                "channels",
                {"part": "snippet,statistics", "id": ",".join(batch)},
            )
            for item in data.get("items", []):
                channels.append(YouTubeChannelItem.model_validate(item).to_channel())

        logger.info("Fetched %d of %d channels from YouTube", len(channels), len(ids))
        return channels

    async def _first_channel_id(self, params: dict) -> Optional[str]:
        data = await self._get("channels", {"part": "id", **params})
        items = data.get("items", [])
        if not items:
            return None
        return items[0]["id"]

    async def find_channel_id_by_handle(self, handle: str) -> Optional[str]:
        """Resolve an @handle (with or without the @) to a channel id."""
        return await self._first_channel_id({"forHandle": handle})

    async def find_channel_id_by_username(self, username: str) -> Optional[str]:
        """Resolve a legacy /user/ name to a channel id."""
        return await self._first_channel_id({"forUsername": username})

    async def get_video_channel_id(self, video_id: str) -> Optional[str]:
        """Return the id of the channel that uploaded a video."""
        data = await self._get("videos", {"part": "snippet", "id": video_id})
        items = data.get("items", [])
        if not items:
            return None
        return items[0].get("snippet", {}).get("channelId") or None
