"""Minimal Apify REST client for the Instagram scraper actor."""

from typing import Any

import aiohttp

from scout.core.exceptions import TransientExternalError
from scout.core.logging import get_logger

logger = get_logger(__name__)

APIFY_BASE_URL = "https://api.apify.com/v2"
INSTAGRAM_SCRAPER_ACTOR = "shu8hvrXbJbY3Eb9W"

# Actor runs are synchronous and can take minutes for larger profiles
RUN_TIMEOUT_SECONDS = 300


class ApifyClient:
    """Runs an actor synchronously and returns its dataset items."""

    def __init__(self, token: str, actor_id: str = INSTAGRAM_SCRAPER_ACTOR) -> None:
        self.token = token
        self.actor_id = actor_id

    async def run(self, actor_input: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Run the actor and wait for its dataset.

        Args:
            actor_input: Actor input document

        Returns:
            Dataset items (possibly empty)

        Raises:
            TransientExternalError: On HTTP or network failure
        """
        url = f"{APIFY_BASE_URL}/acts/{self.actor_id}/run-sync-get-dataset-items"
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    url,
                    params={"token": self.token},
                    json=actor_input,
                    timeout=aiohttp.ClientTimeout(total=RUN_TIMEOUT_SECONDS),
                ) as response:
                    if response.status >= 400:
                        body = await response.text()
                        logger.bind(status=response.status, body=body[:200]).warning(
                            "apify_http_error"
                        )
                        raise TransientExternalError(
                            f"Apify actor {self.actor_id} failed with HTTP {response.status}"
                        )
                    items = await response.json()
        except TimeoutError as e:
            raise TransientExternalError(
                f"Apify actor {self.actor_id} timed out after {RUN_TIMEOUT_SECONDS}s"
            ) from e
        except aiohttp.ClientError as e:
            raise TransientExternalError(f"Apify request failed: {e}") from e

        if not isinstance(items, list):
            return []
        return [item for item in items if isinstance(item, dict)]
