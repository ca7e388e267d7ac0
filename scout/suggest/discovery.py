"""Channel discovery backends used by the suggestion loop."""

from typing import Any, Protocol

import aiohttp

from scout.core.exceptions import TransientExternalError
from scout.core.logging import get_logger
from scout.ingest.apify import ApifyClient
from scout.ingest.base import ChannelProfile
from scout.ingest.instagram import InstagramFetcher, profile_url
from scout.ingest.normalizer import extract_instagram_username
from scout.ingest.youtube import YOUTUBE_API_URL, YouTubeFetcher

logger = get_logger(__name__)


class ChannelDiscovery(Protocol):
    platform: str

    async def search(self, query: str, limit: int) -> list[str]: ...

    async def fetch_profile(self, handle: str) -> ChannelProfile: ...

    def extract_handle(self, url: str) -> str | None: ...

    def suggestion_id(self, handle: str) -> str: ...


class InstagramDiscovery:
    """User search and profile lookup through the Apify Instagram scraper."""

    platform = "instagram"

    def __init__(self, token: str) -> None:
        self.client = ApifyClient(token)
        self.fetcher = InstagramFetcher(token)

    async def search(self, query: str, limit: int) -> list[str]:
        """
        Search Instagram users for a query.

        Returns:
            Profile URLs in result order. Private or empty accounts come back
            as error records that still carry the profile URL.
        """
        self.fetcher.check_credentials()
        results = await self.client.run(
            {
                "addParentData": False,
                "enhanceUserSearchWithFacebookPage": False,
                "isUserReelFeedURL": False,
                "isUserTaggedFeedURL": False,
                "search": query,
                "searchLimit": limit,
                "searchType": "user",
            }
        )
        urls: list[str] = []
        for result in results:
            url = self._result_url(result)
            if url and url not in urls:
                urls.append(url)
        return urls

    @staticmethod
    def _result_url(result: dict[str, Any]) -> str | None:
        if result.get("error") and result.get("url"):
            return str(result["url"])
        username = result.get("username") or result.get("ownerUsername")
        return profile_url(username) if username else None

    async def fetch_profile(self, handle: str) -> ChannelProfile:
        return await self.fetcher.fetch_profile(handle)

    def extract_handle(self, url: str) -> str | None:
        return extract_instagram_username(url)

    def suggestion_id(self, handle: str) -> str:
        return f"ig_{handle.lower()}"


class YouTubeDiscovery:
    """Channel search and lookup through the YouTube Data API."""

    platform = "youtube"

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key
        self.fetcher = YouTubeFetcher(api_key)

    async def search(self, query: str, limit: int) -> list[str]:
        self.fetcher.check_credentials()
        params = {
            "part": "snippet",
            "type": "channel",
            "q": query,
            "maxResults": str(limit),
            "key": self.api_key,
        }
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    f"{YOUTUBE_API_URL}/search",
                    params=params,
                    timeout=aiohttp.ClientTimeout(total=30),
                ) as response:
                    if response.status != 200:
                        raise TransientExternalError(
                            f"YouTube channel search failed: {response.status}"
                        )
                    data = await response.json()
        except TimeoutError as e:
            raise TransientExternalError(f"YouTube channel search timed out for {query!r}") from e
        except aiohttp.ClientError as e:
            raise TransientExternalError(f"YouTube channel search failed: {e}") from e

        urls: list[str] = []
        for item in data.get("items", []):
            channel_id = item.get("id", {}).get("channelId") or item.get("snippet", {}).get(
                "channelId"
            )
            if channel_id:
                urls.append(f"https://www.youtube.com/channel/{channel_id}")
        return urls

    async def fetch_profile(self, handle: str) -> ChannelProfile:
        return await self.fetcher.fetch_profile(handle)

    def extract_handle(self, url: str) -> str | None:
        marker = "/channel/"
        if marker in url:
            return url.split(marker, 1)[1].split("/")[0].split("?")[0] or None
        return None

    def suggestion_id(self, handle: str) -> str:
        return handle


def create_discovery(platform: str, instagram_token: str, youtube_api_key: str) -> ChannelDiscovery:
    if platform == "youtube":
        return YouTubeDiscovery(youtube_api_key)
    return InstagramDiscovery(instagram_token)
