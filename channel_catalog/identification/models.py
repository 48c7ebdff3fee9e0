"""
Data models for channel identification.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..db.database import Channel


class ChannelSource(Enum):
    """Where a resolved channel came from."""
    LOCAL = "local"  # listed in the catalog
    REMOTE = "remote"  # fetched from the YouTube Data API


class IdentificationStatus(Enum):
    """Terminal outcome of a single identification attempt."""
    NOT_VALID = "NotValid"
    ALREADY_LISTED = "AlreadyListed"
    ALREADY_SUGGESTED = "AlreadySuggested"
    NOVEL = "Novel"


@dataclass
class ChannelIdentification:
    """A channel resolved from a URL hint, with its classification."""
    channel_id: Optional[str]
    source: Optional[ChannelSource]
    is_guitar_channel: bool
    channel: Optional[Channel]
    status: Optional[IdentificationStatus] = None

    @classmethod
    def not_valid(cls, channel_id: Optional[str] = None) -> "ChannelIdentification":
        return cls(
            channel_id=channel_id,
            source=None,
            is_guitar_channel=False,
            channel=None,
            status=IdentificationStatus.NOT_VALID,
        )


# YouTube Data API payloads


class Thumbnail(BaseModel):
    url: str = ""


class ChannelSnippet(BaseModel):
    title: str = ""
    description: str = ""
    country: Optional[str] = None
    defaultLanguage: Optional[str] = None
    thumbnails: dict[str, Thumbnail] = Field(default_factory=dict)

    def best_thumbnail(self) -> str:
        for size in ("high", "medium", "default"):
            thumb = self.thumbnails.get(size)
            if thumb and thumb.url:
                return thumb.url
        return ""


class ChannelStatistics(BaseModel):
    subscriberCount: int = 0
    videoCount: int = 0
    viewCount: int = 0


class YouTubeChannelItem(BaseModel):
    """A single item of a channels.list response."""
    id: str
    snippet: ChannelSnippet = Field(default_factory=ChannelSnippet)
    statistics: ChannelStatistics = Field(default_factory=ChannelStatistics)

    def to_channel(self) -> Channel:
        return Channel(
            channel_id=self.id,
            title=self.snippet.title,
            description=self.snippet.description,
            thumbnail_url=self.snippet.best_thumbnail(),
            subscriber_count=self.statistics.subscriberCount,
            video_count=self.statistics.videoCount,
            view_count=self.statistics.viewCount,
            country=self.snippet.country,
            language=self.snippet.defaultLanguage,
        )
