from pathlib import Path

import backoff
from openai import APIConnectionError, AsyncOpenAI, RateLimitError

from scout.core.exceptions import TransientExternalError
from scout.core.logging import get_logger

logger = get_logger(__name__)


class OpenAITranscriber:
    """Speech-to-text through the OpenAI audio transcription endpoint."""

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o-mini-transcribe") -> None:
        self.client = client
        self.model = model

    @backoff.on_exception(
        backoff.expo,
        (RateLimitError, APIConnectionError),
        max_tries=4,
        max_time=120,
    )
    async def _create(self, audio_path: Path) -> str:
        with open(audio_path, "rb") as audio_file:
            response = await self.client.audio.transcriptions.create(
                model=self.model,
                file=audio_file,
            )
        return response.text

    async def transcribe(self, audio_path: Path) -> str:
        """
        Transcribe an audio file.

        Returns:
            The transcript text (may be empty for silent audio)

        Raises:
            TransientExternalError: If the API call fails
        """
        try:
            text = await self._create(audio_path)
        except Exception as e:
            raise TransientExternalError(f"Transcription failed: {e}") from e
        logger.bind(audio=audio_path.name, chars=len(text)).debug("audio_transcribed")
        return text.strip()
