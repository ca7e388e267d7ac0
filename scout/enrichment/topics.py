import backoff
from httpx import HTTPStatusError
from openai import AsyncOpenAI, RateLimitError

from scout.core.exceptions import TransientExternalError
from scout.core.logging import get_logger
from scout.ingest.normalizer import normalize_topic_name
from scout.schemas.llm import TopicInferenceOutput

logger = get_logger(__name__)

SYSTEM_PROMPT = """You label short-form videos with topics for an engagement analysis.

Return at most 5 topics, most relevant first. A topic is 1-3 lowercase words
naming a subject a viewer would search for (e.g. "budget travel", "sourdough",
"personal finance"). Prefer subjects over formats: not "video", "reel",
"tutorial" or "vlog". Return an empty list if the text says nothing concrete."""

# Transcripts beyond this are truncated before prompting
MAX_TRANSCRIPT_CHARS = 6000


class OpenAITopicInferrer:
    """Infers an ordered list of topic labels from an item's text."""

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o-mini", max_topics: int = 5) -> None:
        self.client = client
        self.model = model
        self.max_topics = max_topics

    @backoff.on_exception(
        backoff.expo,
        (RateLimitError, HTTPStatusError),
        max_tries=5,
        max_time=120,
    )
    async def _parse(self, user_prompt: str) -> TopicInferenceOutput | None:
        response = await self.client.beta.chat.completions.parse(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            response_format=TopicInferenceOutput,
            temperature=0.2,
        )
        return response.choices[0].message.parsed

    async def infer(
        self,
        transcript: str | None,
        title: str,
        description: str | None,
        platform: str,
    ) -> list[str]:
        """
        Infer topics for one item.

        Args:
            transcript: Transcribed speech, if any
            title: Item title
            description: Item description or caption
            platform: Source platform, for context

        Returns:
            Up to max_topics normalized labels, most relevant first

        Raises:
            TransientExternalError: If the API call fails
        """
        user_prompt = f"Platform: {platform}\nTitle: {title}\n"
        if description and description != title:
            user_prompt += f"Description: {description}\n"
        if transcript:
            user_prompt += f"Transcript: {transcript[:MAX_TRANSCRIPT_CHARS]}\n"

        try:
            result = await self._parse(user_prompt)
        except Exception as e:
            raise TransientExternalError(f"Topic inference failed: {e}") from e

        if result is None:
            logger.bind(title=title[:50]).warning("topic_inference_no_result")
            return []

        topics: list[str] = []
        for label in result.topics:
            name = normalize_topic_name(label)
            if name and name not in topics:
                topics.append(name)
        return topics[: self.max_topics]
