from openai import AsyncOpenAI

from scout.core.exceptions import TransientExternalError
from scout.core.logging import get_logger
from scout.core.retry import RetryConfig, retry_with_backoff
from scout.schemas.llm import SearchQueriesOutput

logger = get_logger(__name__)

SYSTEM_PROMPT = """You help find social media creators worth following.

Given a topic that performs well for an audience, write short search terms
(1-4 words each) that would surface creator accounts focused on that topic
when typed into the platform's user search. Vary the angle of each term.
Do not include hashtags, quotes or the platform name."""

# 500ms, 1s, 2s between attempts
QUERY_RETRY = RetryConfig(max_attempts=3, backoff_base=0.5, backoff_max=8.0, jitter=False)


class OpenAIQueryGenerator:
    """Generates discovery search queries for a topic."""

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o-mini") -> None:
        self.client = client
        self.model = model

    async def _parse(self, user_prompt: str) -> SearchQueriesOutput | None:
        response = await self.client.beta.chat.completions.parse(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            response_format=SearchQueriesOutput,
            temperature=0.7,
        )
        return response.choices[0].message.parsed

    async def generate(self, topic: str, related: list[str], count: int) -> list[str]:
        """
        Generate up to count distinct search queries for a topic.

        Args:
            topic: Topic name to search for
            related: Names of topics that often co-occur with it, for context
            count: Number of queries wanted

        Returns:
            Distinct, non-empty queries (at most count)

        Raises:
            TransientExternalError: If every attempt fails
        """
        user_prompt = f"Topic: {topic}\n"
        if related:
            user_prompt += f"Often appears with: {', '.join(related)}\n"
        user_prompt += f"Write {count} search terms."

        try:
            result = await retry_with_backoff(
                lambda: self._parse(user_prompt),
                config=QUERY_RETRY,
                operation_name=f"generate_queries:{topic}",
            )
        except Exception as e:
            raise TransientExternalError(f"Query generation failed for {topic}: {e}") from e

        queries: list[str] = []
        for query in result.queries if result else []:
            clean = query.strip().strip('"').lstrip("#").strip()
            if clean and clean.lower() not in (q.lower() for q in queries):
                queries.append(clean)
        return queries[:count]
