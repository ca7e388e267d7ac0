from scout.stores.content import ContentStore
from scout.stores.jobs import JobSpec, JobStore
from scout.stores.suggestions import SuggestionRecord, SuggestionStore

__all__ = [
    "ContentStore",
    "JobSpec",
    "JobStore",
    "SuggestionRecord",
    "SuggestionStore",
]
