from scout.ingest.base import (
    ChannelProfile,
    FetchResult,
    InstagramItem,
    ItemCore,
    PlatformFetcher,
    YouTubeItem,
)
from scout.ingest.normalizer import extract_hashtags, normalize_topic_name

__all__ = [
    "ChannelProfile",
    "FetchResult",
    "InstagramItem",
    "ItemCore",
    "PlatformFetcher",
    "YouTubeItem",
    "extract_hashtags",
    "normalize_topic_name",
]
