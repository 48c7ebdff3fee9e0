"""
Extract a YouTube channel id from a free-text URL hint.

Channel URLs and bare ids resolve locally; handles, legacy user names and
video links need a Data API lookup.

Custom /c/ URLs have no lookup of their own in the Data API. The name is
tried as a handle and as a legacy user name, and is only accepted when the
lookups do not point at two different channels.
"""
import logging
import re
from typing import Optional

from .youtube_client import YouTubeDataClient

logger = logging.getLogger(__name__)

CHANNEL_ID_RE = re.compile(r'^UC[a-zA-Z0-9_-]{22}$')

# youtube.com/channel/UC... format
CHANNEL_URL_PATTERNS = [
    r'(?i:youtube\.com)/channel/(UC[a-zA-Z0-9_-]{22})(?![a-zA-Z0-9_-])',
]

HANDLE_PATTERNS = [
    # @handle format
    r'^@([a-zA-Z0-9._-]{3,30})$',
    # youtube.com/@handle format
    r'(?i:youtube\.com)/@([a-zA-Z0-9._-]{3,30})',
]

CUSTOM_URL_PATTERNS = [
    # youtube.com/c/custom format
    r'(?i:youtube\.com)/c/([a-zA-Z0-9._-]+)',
]

USERNAME_PATTERNS = [
    # youtube.com/user/name format
    r'(?i:youtube\.com)/user/([a-zA-Z0-9._-]+)',
]

VIDEO_PATTERNS = [
    # youtube.com/watch?v=VIDEO_ID format
    r'(?i:youtube\.com)/watch\?(?:[^#\s]*&)?v=([a-zA-Z0-9_-]{11})',
    # youtu.be/VIDEO_ID format
    r'(?i:youtu\.be)/([a-zA-Z0-9_-]{11})',
    # youtube.com/shorts/VIDEO_ID format
    r'(?i:youtube\.com)/shorts/([a-zA-Z0-9_-]{11})',
]


def _search(patterns: list[str], text: str) -> Optional[str]:
    for pattern in patterns:
        match = re.search(pattern, text)
        if match:
            return match.group(1)
    return None


def match_channel_id(text: str) -> Optional[str]:
    """Return the channel id if text is a bare id or a /channel/ URL."""
    candidate = (text or "").strip()
    if CHANNEL_ID_RE.match(candidate):
        return candidate
    return _search(CHANNEL_URL_PATTERNS, candidate)


class ChannelIdExtractor:
    """Turns a URL hint into a channel id, using the Data API when needed."""

    def __init__(self, youtube: YouTubeDataClient):
        if youtube is None:
            raise ValueError("youtube client is required")
        self.youtube = youtube

    async def extract(self, url_hint: Optional[str]) -> Optional[str]:
        """
        Extract a channel id from a URL hint.

        Args:
            url_hint: Anything a user might paste: a channel URL, an
                      @handle, a legacy user URL or a video link.

        Returns:
            Channel id, or None if the hint names no channel.
        """
        text = (url_hint or "").strip()
        if not text:
            return None

        channel_id = match_channel_id(text)
        if channel_id:
            return channel_id

        handle = _search(HANDLE_PATTERNS, text)
        if handle:
            logger.debug("Resolving handle %s", handle)
            return await self.youtube.find_channel_id_by_handle(handle)

        custom_name = _search(CUSTOM_URL_PATTERNS, text)
        if custom_name:
            return await self._resolve_custom_name(custom_name)

        username = _search(USERNAME_PATTERNS, text)
        if username:
            logger.debug("Resolving legacy username %s", username)
            return await self.youtube.find_channel_id_by_username(username)

        video_id = _search(VIDEO_PATTERNS, text)
        if video_id:
            logger.debug("Resolving uploader of video %s", video_id)
            return await self.youtube.get_video_channel_id(video_id)

        logger.info("No channel reference found in: %s", text[:100])
        return None

    async def _resolve_custom_name(self, name: str) -> Optional[str]:
        logger.debug("Resolving custom URL name %s", name)
        by_handle = await self.youtube.find_channel_id_by_handle(name)
        by_username = await self.youtube.find_channel_id_by_username(name)

        candidates = {cid for cid in (by_handle, by_username) if cid}
        if len(candidates) > 1:
            logger.warning(
                "Custom URL name %s is ambiguous: handle -> %s, username -> %s",
                name, by_handle, by_username
            )
            return None
        return candidates.pop() if candidates else None
