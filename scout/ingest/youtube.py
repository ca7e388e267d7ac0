from typing import Any

import aiohttp

from scout.core.datetime_utils import get_cutoff, parse_iso_datetime
from scout.core.exceptions import TransientExternalError
from scout.core.logging import get_logger
from scout.ingest.base import ChannelProfile, FetchResult, PlatformFetcher, YouTubeItem
from scout.ingest.normalizer import clean_handle, parse_iso_duration, to_int

logger = get_logger(__name__)

YOUTUBE_API_URL = "https://www.googleapis.com/youtube/v3"
PAGE_SIZE = 50


class YouTubeFetcher(PlatformFetcher):
    """
    Fetcher for a YouTube channel's recent uploads.

    Uses the Data API v3: resolves the handle to a channel, walks the uploads
    playlist newest-first until the lookback cutoff, then loads statistics and
    durations for the collected videos in chunks of 50.
    """

    platform = "youtube"
    credential_name = "YOUTUBE_API_KEY"

    def __init__(self, api_key: str, max_items: int | None = None) -> None:
        super().__init__(api_key)
        self.max_items = max_items

    async def fetch(self, handle: str, lookback_days: int | None = None) -> FetchResult:
        self.check_credentials()
        handle = clean_handle(handle)
        cutoff = get_cutoff(days=lookback_days) if lookback_days else None

        async with aiohttp.ClientSession() as session:
            channel = await self._get_channel(session, handle)
            profile = self._parse_channel(channel, handle)
            uploads = channel.get("contentDetails", {}).get("relatedPlaylists", {}).get("uploads")

            video_ids = await self._list_upload_ids(session, uploads, cutoff) if uploads else []
            videos = await self._get_videos(session, video_ids)

        items = [self._parse_video(video, profile.id) for video in videos]
        if cutoff:
            items = [i for i in items if i.published_at is None or i.published_at >= cutoff]

        logger.bind(handle=handle, count=len(items)).info("youtube_fetch_success")
        return FetchResult(profile=profile, items=items)

    async def fetch_profile(self, handle: str) -> ChannelProfile:
        """Fetch channel metadata only (by @handle or UC channel id)."""
        self.check_credentials()
        handle = clean_handle(handle)
        async with aiohttp.ClientSession() as session:
            channel = await self._get_channel(session, handle)
        return self._parse_channel(channel, handle)

    async def _get(
        self, session: aiohttp.ClientSession, resource: str, params: dict[str, str]
    ) -> dict[str, Any]:
        """GET a Data API resource, raising TransientExternalError on failure."""
        try:
            async with session.get(
                f"{YOUTUBE_API_URL}/{resource}",
                params={**params, "key": self.api_key},
                timeout=aiohttp.ClientTimeout(total=30),
            ) as response:
                if response.status != 200:
                    logger.bind(resource=resource, status=response.status).warning(
                        "youtube_http_error"
                    )
                    raise TransientExternalError(
                        f"YouTube {resource} request failed: {response.status}"
                    )
                data: dict[str, Any] = await response.json()
                return data
        except TimeoutError as e:
            raise TransientExternalError(f"YouTube {resource} request timed out") from e
        except aiohttp.ClientError as e:
            raise TransientExternalError(f"YouTube {resource} request failed: {e}") from e

    async def _get_channel(self, session: aiohttp.ClientSession, handle: str) -> dict[str, Any]:
        part = "snippet,contentDetails,statistics"
        if handle.startswith("UC") and len(handle) == 24:
            data = await self._get(session, "channels", {"part": part, "id": handle})
        else:
            data = await self._get(session, "channels", {"part": part, "forHandle": f"@{handle}"})

        items = data.get("items") or []
        if not items:
            raise TransientExternalError(f"Channel not found for handle {handle}")
        channel: dict[str, Any] = items[0]
        return channel

    def _parse_channel(self, channel: dict[str, Any], handle: str) -> ChannelProfile:
        snippet = channel.get("snippet", {})
        statistics = channel.get("statistics", {})
        thumbnails = snippet.get("thumbnails", {})
        thumbnail = (thumbnails.get("high") or thumbnails.get("default") or {}).get("url")
        return ChannelProfile(
            id=channel["id"],
            handle=(snippet.get("customUrl") or handle).lstrip("@"),
            platform=self.platform,
            title=snippet.get("title") or handle,
            follower_count=to_int(statistics.get("subscriberCount"), default=0) or None,
            posts_count=to_int(statistics.get("videoCount"), default=0) or None,
            thumbnail_url=thumbnail,
            biography=snippet.get("description") or None,
        )

    async def _list_upload_ids(
        self,
        session: aiohttp.ClientSession,
        playlist_id: str,
        cutoff: Any,
    ) -> list[str]:
        """Walk the uploads playlist newest-first, stopping at the cutoff."""
        ids: list[str] = []
        page_token = ""
        while True:
            params = {"part": "contentDetails", "playlistId": playlist_id, "maxResults": str(PAGE_SIZE)}
            if page_token:
                params["pageToken"] = page_token
            data = await self._get(session, "playlistItems", params)

            reached_cutoff = False
            for entry in data.get("items", []):
                details = entry.get("contentDetails", {})
                published = parse_iso_datetime(details.get("videoPublishedAt"))
                if cutoff and published and published < cutoff:
                    reached_cutoff = True
                    break
                if details.get("videoId"):
                    ids.append(details["videoId"])
                if self.max_items and len(ids) >= self.max_items:
                    return ids

            page_token = data.get("nextPageToken", "")
            if reached_cutoff or not page_token:
                return ids

    async def _get_videos(
        self, session: aiohttp.ClientSession, video_ids: list[str]
    ) -> list[dict[str, Any]]:
        videos: list[dict[str, Any]] = []
        for start in range(0, len(video_ids), PAGE_SIZE):
            chunk = video_ids[start : start + PAGE_SIZE]
            data = await self._get(
                session,
                "videos",
                {"part": "snippet,contentDetails,statistics", "id": ",".join(chunk)},
            )
            videos.extend(data.get("items", []))
        return videos

    def _parse_video(self, video: dict[str, Any], channel_id: str) -> YouTubeItem:
        snippet = video.get("snippet", {})
        statistics = video.get("statistics", {})
        thumbnails = snippet.get("thumbnails", {})
        thumbnail = (thumbnails.get("high") or thumbnails.get("default") or {}).get("url")
        return YouTubeItem(
            id=f"yt_{video['id']}",
            channel_id=channel_id,
            title=snippet.get("title", ""),
            description=snippet.get("description") or None,
            published_at=parse_iso_datetime(snippet.get("publishedAt")),
            view_count=to_int(statistics.get("viewCount")),
            like_count=to_int(statistics.get("likeCount")),
            comment_count=to_int(statistics.get("commentCount")),
            duration_seconds=parse_iso_duration(video.get("contentDetails", {}).get("duration")),
            media_url=f"https://www.youtube.com/watch?v={video['id']}",
            display_url=thumbnail,
            tags=snippet.get("tags") or [],
            raw=video,
        )
