from scout.schemas.llm import SearchQueriesOutput, TopicInferenceOutput

__all__ = ["SearchQueriesOutput", "TopicInferenceOutput"]
