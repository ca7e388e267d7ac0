from pathlib import Path

import aiohttp

from scout.core.logging import get_logger

logger = get_logger(__name__)

CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


class ImageDownloader:
    """Best-effort download of an item's display image to local storage."""

    def __init__(self, image_dir: str | Path) -> None:
        self.image_dir = Path(image_dir)

    async def fetch(self, url: str, item_id: str) -> str | None:
        """
        Download the image at url as <image_dir>/<item_id>.<ext>.

        Returns:
            Local path as string, or None if the download failed
        """
        try:
            self.image_dir.mkdir(parents=True, exist_ok=True)
            async with aiohttp.ClientSession() as session:
                async with session.get(url, timeout=aiohttp.ClientTimeout(total=30)) as response:
                    if response.status != 200:
                        logger.bind(item_id=item_id, status=response.status).warning(
                            "image_download_http_error"
                        )
                        return None
                    content_type = response.headers.get("Content-Type", "").split(";")[0]
                    data = await response.read()
            path = self.image_dir / f"{item_id}{CONTENT_TYPE_EXTENSIONS.get(content_type, '.jpg')}"
            path.write_bytes(data)
        except (aiohttp.ClientError, TimeoutError, OSError) as e:
            logger.bind(item_id=item_id, error=str(e)).warning("image_download_failed")
            return None
        return str(path)
