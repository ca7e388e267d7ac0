from pydantic import BaseModel, Field


class TopicInferenceOutput(BaseModel):
    """
    Structured output schema for topic inference.

    Used with OpenAI's response_format for guaranteed schema compliance.
    """

    topics: list[str] = Field(
        description=(
            "0 to 5 short topic labels (1-3 words, lowercase, no '#'), "
            "most relevant first"
        ),
        max_length=5,
    )


class SearchQueriesOutput(BaseModel):
    """Structured output schema for channel discovery query generation."""

    queries: list[str] = Field(
        description="Short search terms that would find creators covering the topic",
    )
