# Channel identification module
from .models import ChannelIdentification, ChannelSource, IdentificationStatus
from .classifier import is_guitar_channel
from .youtube_client import YouTubeDataClient
from .extractor import ChannelIdExtractor, match_channel_id
from .channel_detail import ChannelDetailResolver
from .suggestions import has_existing_suggestion
from .pipeline import IdentificationPipeline
