"""Media download and audio extraction via yt-dlp and ffmpeg.

All files are written inside the working directory the caller provides; the
caller owns that directory and its cleanup.
"""

import asyncio
from pathlib import Path

from scout.core.exceptions import NoAudioStreamError, TransientExternalError
from scout.core.logging import get_logger

logger = get_logger(__name__)

MEDIA_STEM = "media"
AUDIO_FILENAME = "audio.mp3"


async def run_command(*args: str, timeout: float = 300) -> str:
    """
    Run an external command and return its stdout.

    Raises:
        TransientExternalError: If the command is missing, times out or exits non-zero
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise TransientExternalError(f"{args[0]} is not installed") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError as e:
        process.kill()
        await process.wait()
        raise TransientExternalError(f"{args[0]} timed out after {timeout}s") from e

    if process.returncode != 0:
        message = stderr.decode(errors="replace").strip().splitlines()
        detail = message[-1] if message else f"exit code {process.returncode}"
        raise TransientExternalError(f"{args[0]} failed: {detail}")
    return stdout.decode(errors="replace")


class MediaProcessor:
    """Downloads an item's media and extracts a transcription-ready audio track."""

    def __init__(self, timeout_seconds: float = 300) -> None:
        self.timeout_seconds = timeout_seconds

    async def download_media(self, url: str, workdir: Path) -> Path:
        """Download media at url into workdir with yt-dlp and return the file path."""
        template = str(workdir / f"{MEDIA_STEM}.%(ext)s")
        await run_command(
            "yt-dlp",
            "--quiet",
            "--no-playlist",
            "--no-progress",
            "-f",
            "bestaudio/best",
            "-o",
            template,
            url,
            timeout=self.timeout_seconds,
        )
        downloads = sorted(p for p in workdir.glob(f"{MEDIA_STEM}.*") if p.is_file())
        if not downloads:
            raise TransientExternalError(f"yt-dlp produced no file for {url}")
        return downloads[0]

    async def has_audio_stream(self, media_path: Path) -> bool:
        output = await run_command(
            "ffprobe",
            "-v",
            "quiet",
            "-select_streams",
            "a",
            "-show_entries",
            "stream=codec_type",
            "-of",
            "csv=p=0",
            str(media_path),
            timeout=60,
        )
        return "audio" in output

    async def extract_audio(self, media_path: Path, workdir: Path) -> Path:
        """
        Extract a mono 16 kHz mp3 track from the media file.

        Raises:
            NoAudioStreamError: If the media has no audio stream
        """
        if not await self.has_audio_stream(media_path):
            raise NoAudioStreamError(f"{media_path.name} has no audio stream")

        audio_path = workdir / AUDIO_FILENAME
        await run_command(
            "ffmpeg",
            "-y",
            "-loglevel",
            "error",
            "-i",
            str(media_path),
            "-vn",
            "-ac",
            "1",
            "-ar",
            "16000",
            "-b:a",
            "64k",
            str(audio_path),
            timeout=self.timeout_seconds,
        )
        logger.bind(media=media_path.name, size=audio_path.stat().st_size).debug("audio_extracted")
        return audio_path
