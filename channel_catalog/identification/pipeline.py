"""
Channel identification pipeline.

Turns a user-supplied URL hint into a single identification outcome:
not valid, already listed, already suggested, or novel.
"""
import logging
from dataclasses import replace
from typing import Optional

from ..db.database import Database
from .channel_detail import ChannelDetailResolver
from .extractor import ChannelIdExtractor
from .models import ChannelIdentification, ChannelSource, IdentificationStatus
from .suggestions import has_existing_suggestion

logger = logging.getLogger(__name__)


class IdentificationPipeline:
    """Orchestrates extraction, detail resolution and the suggestion check."""

    def __init__(
        self,
        db: Database,
        extractor: ChannelIdExtractor,
        resolver: ChannelDetailResolver,
    ):
        if db is None:
            raise ValueError("db is required")
        if extractor is None:
            raise ValueError("extractor is required")
        if resolver is None:
            raise ValueError("resolver is required")
        self.db = db
        self.extractor = extractor
        self.resolver = resolver

    async def identify(self, url_hint: Optional[str]) -> ChannelIdentification:
        """Identify the channel a URL hint refers to.

        Steps:
            1. Reject blank hints
            2. Extract a channel id from the hint
            3. Resolve channel details (catalog first, then YouTube)
            4. For channels found on YouTube, check suggestion history

        Args:
            url_hint: Free text pasted by a user.

        Returns:
            ChannelIdentification carrying its IdentificationStatus. Only
            NOT_VALID results come without a channel.
        """
        if url_hint is None or not url_hint.strip():
            return ChannelIdentification.not_valid()

        channel_id = await self.extractor.extract(url_hint)
        if not channel_id:
            logger.info("Could not extract a channel id from: %s", url_hint[:100])
            return ChannelIdentification.not_valid()

        identification = await self.resolver.resolve_one(channel_id)
        if identification is None:
            logger.info("Channel %s not found locally or on YouTube", channel_id)
            return ChannelIdentification.not_valid(channel_id)

        if identification.source is ChannelSource.REMOTE:
            if has_existing_suggestion(self.db, [channel_id]):
                status = IdentificationStatus.ALREADY_SUGGESTED
            else:
                status = IdentificationStatus.NOVEL
        else:
            status = IdentificationStatus.ALREADY_LISTED

        logger.info(
            "Identified channel %s: %s (guitar=%s)",
            channel_id,
            status.value,
            identification.is_guitar_channel,
        )
        return replace(identification, status=status)
