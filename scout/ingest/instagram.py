from typing import Any

from scout.core.datetime_utils import get_cutoff, parse_iso_datetime, utc_now
from scout.core.exceptions import TransientExternalError
from scout.core.logging import get_logger
from scout.ingest.apify import ApifyClient
from scout.ingest.base import ChannelProfile, FetchResult, InstagramItem, PlatformFetcher
from scout.ingest.normalizer import clean_handle, to_int

logger = get_logger(__name__)

DEFAULT_MAX_ITEMS = 25

# Look one extra day back so engagement on the newest known posts is refreshed
ENGAGEMENT_LOOKBACK_DAYS = 1

# Used when a job asks for the full history
FULL_HISTORY_SINCE = "2023-01-01"


def profile_url(username: str) -> str:
    return f"https://www.instagram.com/{username}/"


def parse_profile(data: dict[str, Any], username: str) -> ChannelProfile:
    """Map a scraper "details" record to a ChannelProfile."""
    handle = (data.get("username") or username).lower()
    external = data.get("externalUrls") or []
    external_urls = [
        entry.get("url") if isinstance(entry, dict) else str(entry)
        for entry in external
        if entry
    ]
    if data.get("externalUrl") and data["externalUrl"] not in external_urls:
        external_urls.append(data["externalUrl"])
    return ChannelProfile(
        id=f"ig_{handle}",
        handle=handle,
        platform="instagram",
        title=data.get("fullName") or handle,
        follower_count=data.get("followersCount"),
        follows_count=data.get("followsCount"),
        posts_count=data.get("postsCount"),
        thumbnail_url=data.get("profilePicUrlHD") or data.get("profilePicUrl"),
        biography=data.get("biography") or None,
        verified=bool(data.get("verified")),
        external_urls=[url for url in external_urls if url],
    )


class InstagramFetcher(PlatformFetcher):
    """
    Fetcher for an Instagram profile's recent posts through the Apify scraper.

    Two actor runs per sync: one in "details" mode for the profile and one in
    "stories" mode for posts newer than the lookback date.
    """

    platform = "instagram"
    credential_name = "APIFY_API_TOKEN"

    def __init__(self, api_key: str, max_items: int | None = DEFAULT_MAX_ITEMS) -> None:
        super().__init__(api_key)
        self.max_items = max_items or DEFAULT_MAX_ITEMS
        self.client = ApifyClient(api_key)

    async def fetch(self, handle: str, lookback_days: int | None = None) -> FetchResult:
        self.check_credentials()
        username = clean_handle(handle).lower()

        profile = await self.fetch_profile(username)

        if lookback_days:
            since = get_cutoff(days=lookback_days + ENGAGEMENT_LOOKBACK_DAYS).date().isoformat()
        else:
            since = FULL_HISTORY_SINCE

        posts = await self.client.run(
            {
                "addParentData": False,
                "directUrls": [profile_url(username)],
                "enhanceUserSearchWithFacebookPage": False,
                "isUserReelFeedURL": False,
                "isUserTaggedFeedURL": False,
                "onlyPostsNewerThan": since,
                "resultsLimit": self.max_items,
                "resultsType": "stories",
                "searchLimit": self.max_items,
            }
        )
        items = [
            self._parse_post(post, profile.id) for post in posts if post.get("shortCode")
        ]

        logger.bind(handle=username, since=since, count=len(items)).info("instagram_fetch_success")
        return FetchResult(profile=profile, items=items)

    async def fetch_profile(self, username: str) -> ChannelProfile:
        """Fetch profile details for a username."""
        self.check_credentials()
        details = await self.client.run(
            {
                "addParentData": False,
                "directUrls": [profile_url(username)],
                "enhanceUserSearchWithFacebookPage": False,
                "isUserReelFeedURL": False,
                "isUserTaggedFeedURL": False,
                "resultsLimit": 1,
                "resultsType": "details",
                "searchLimit": 1,
            }
        )
        if not details or details[0].get("error"):
            raise TransientExternalError(f"No profile data found for {username}")
        return parse_profile(details[0], username)

    def _parse_post(self, post: dict[str, Any], channel_id: str) -> InstagramItem:
        caption = post.get("caption") or ""
        duration = post.get("videoDuration")
        published = parse_iso_datetime(post.get("timestamp"))
        return InstagramItem(
            id=f"ig_{post['shortCode']}",
            channel_id=channel_id,
            short_code=post["shortCode"],
            title=caption[:500] or "Unnamed reel",
            description=caption or None,
            published_at=published or utc_now(),
            view_count=to_int(post.get("videoViewCount") or post.get("videoPlayCount")),
            like_count=max(to_int(post.get("likesCount")), 0),  # -1 when hidden
            comment_count=to_int(post.get("commentsCount")),
            duration_seconds=round(duration) if isinstance(duration, (int, float)) else None,
            media_url=post.get("videoUrl"),
            display_url=post.get("displayUrl"),
            hashtags=post.get("hashtags") or [],
            raw=post,
        )
