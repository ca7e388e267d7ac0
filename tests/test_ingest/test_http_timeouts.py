"""Tests for timeout handling in the platform HTTP clients."""

import aiohttp
import pytest

from scout.core.exceptions import TransientExternalError
from scout.ingest.apify import RUN_TIMEOUT_SECONDS, ApifyClient
from scout.ingest.youtube import YouTubeFetcher
from scout.suggest.discovery import YouTubeDiscovery

pytestmark = pytest.mark.asyncio


class TimingOutSession:
    """Stands in for aiohttp.ClientSession; every request times out."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    def get(self, *args, **kwargs):
        raise TimeoutError()

    def post(self, *args, **kwargs):
        raise TimeoutError()


@pytest.fixture(autouse=True)
def timing_out_session(monkeypatch):
    monkeypatch.setattr(aiohttp, "ClientSession", TimingOutSession)


class TestTimeouts:
    """Timeouts surface as TransientExternalError with a readable message."""

    async def test_apify_run_timeout(self):
        """Should name the actor and the timeout."""
        client = ApifyClient("token", actor_id="actor123")

        with pytest.raises(TransientExternalError) as exc_info:
            await client.run({"search": "cooking"})

        assert str(exc_info.value) == f"Apify actor actor123 timed out after {RUN_TIMEOUT_SECONDS}s"

    async def test_youtube_request_timeout(self):
        """Should wrap the timeout of a Data API request."""
        fetcher = YouTubeFetcher("key")

        with pytest.raises(TransientExternalError, match="YouTube channels request timed out"):
            await fetcher.fetch_profile("creator")

    async def test_youtube_search_timeout(self):
        """Should wrap the timeout of a channel search."""
        discovery = YouTubeDiscovery("key")

        with pytest.raises(TransientExternalError, match="YouTube channel search timed out"):
            await discovery.search("meal prep", 3)
