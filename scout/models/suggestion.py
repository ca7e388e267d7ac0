from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scout.core.datetime_utils import utc_now
from scout.models.base import Base


class SuggestedChannel(Base):
    """A discovered channel proposed for tracking."""

    __tablename__ = "suggested_channels"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(100), primary_key=True, default="default")
    platform: Mapped[str] = mapped_column(String(20))
    username: Mapped[str] = mapped_column(String(255), index=True)
    full_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    follower_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    follows_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    posts_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    biography: Mapped[str | None] = mapped_column(Text, nullable=True)
    external_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    profile_pic_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    search_term: Mapped[str] = mapped_column(String(500))
    category_topic_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("topics.id", ondelete="SET NULL"), nullable=True
    )
    found_at: Mapped[datetime] = mapped_column(default=utc_now, index=True)

    def __repr__(self) -> str:
        return f"<SuggestedChannel {self.id} ({self.search_term})>"


class SearchedTopic(Base):
    """Marks a topic as already used for discovery by a tenant."""

    __tablename__ = "searched_topics"

    tenant_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    topic_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("topics.id", ondelete="CASCADE"), primary_key=True
    )
    searched_at: Mapped[datetime] = mapped_column(default=utc_now)
