from abc import ABC, abstractmethod
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from scout.core.exceptions import ConfigurationError
from scout.ingest.normalizer import extract_hashtags


class ItemCore(BaseModel):
    """Fields every platform item shares once normalized."""

    id: str  # platform-qualified: yt_<videoId>, ig_<shortCode>
    platform: str
    channel_id: str
    title: str = ""
    description: str | None = None
    published_at: datetime | None = None
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    duration_seconds: int | None = None
    media_url: str | None = None
    display_url: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)  # opaque platform payload

    def author_topics(self) -> list[str]:
        """Hashtags written by the creator in the title and description."""
        return extract_hashtags(f"{self.title}\n{self.description or ''}")


class YouTubeItem(ItemCore):
    """A YouTube video from the Data API."""

    platform: Literal["youtube"] = "youtube"
    tags: list[str] = Field(default_factory=list)


class InstagramItem(ItemCore):
    """An Instagram post or reel from the scraper."""

    platform: Literal["instagram"] = "instagram"
    short_code: str
    hashtags: list[str] = Field(default_factory=list)

    def author_topics(self) -> list[str]:
        names = super().author_topics()
        for tag in self.hashtags:
            name = tag.lstrip("#").lower()
            if name and name not in names:
                names.append(name)
        return names


PlatformItem = Annotated[YouTubeItem | InstagramItem, Field(discriminator="platform")]


class ChannelProfile(BaseModel):
    """Channel or profile metadata returned alongside a fetch."""

    id: str  # platform-qualified channel id
    handle: str
    platform: str
    title: str
    follower_count: int | None = None
    follows_count: int | None = None
    posts_count: int | None = None
    thumbnail_url: str | None = None
    biography: str | None = None
    verified: bool = False
    external_urls: list[str] = Field(default_factory=list)


class FetchResult(BaseModel):
    """A channel profile plus the items published within the lookback window."""

    profile: ChannelProfile
    items: list[PlatformItem] = Field(default_factory=list)


class PlatformFetcher(ABC):
    """Abstract base class for per-platform channel fetchers."""

    platform: str = "unknown"
    credential_name: str = ""

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    def check_credentials(self) -> None:
        """Raise ConfigurationError when the platform credential is missing."""
        if not self.api_key:
            raise ConfigurationError(f"{self.credential_name} is not configured")

    @abstractmethod
    async def fetch(self, handle: str, lookback_days: int | None = None) -> FetchResult:
        """
        Fetch a channel profile and its recent items.

        Args:
            handle: Channel handle, username or URL
            lookback_days: Only return items newer than this many days (None = all)

        Returns:
            FetchResult with profile and normalized items
        """
