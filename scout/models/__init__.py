from scout.models.base import Base
from scout.models.channel import Channel
from scout.models.content import ContentItem, Platform, TranscriptionStatus
from scout.models.graph import TopicGraphSnapshot
from scout.models.job import INTERRUPTED_MESSAGE, JobStatus, SyncJob
from scout.models.suggestion import SearchedTopic, SuggestedChannel
from scout.models.topic import ItemTopic, Topic, TopicSource

__all__ = [
    "Base",
    "Channel",
    "ContentItem",
    "Platform",
    "TranscriptionStatus",
    "Topic",
    "ItemTopic",
    "TopicSource",
    "SyncJob",
    "JobStatus",
    "INTERRUPTED_MESSAGE",
    "SuggestedChannel",
    "SearchedTopic",
    "TopicGraphSnapshot",
]
