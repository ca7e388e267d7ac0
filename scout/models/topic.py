import enum

from sqlalchemy import Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scout.models.base import Base, TimestampMixin, enum_values


class TopicSource(str, enum.Enum):
    """Provenance of an item-topic association."""

    AUTHOR = "author"  # hashtags written by the creator
    AI = "ai"  # inferred from transcript and text


class Topic(Base, TimestampMixin):
    """A normalized topic label shared across items."""

    __tablename__ = "topics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True)

    def __repr__(self) -> str:
        return f"<Topic {self.id}: {self.name}>"


class ItemTopic(Base):
    """Association of an item with a topic under one provenance."""

    __tablename__ = "item_topics"

    item_id: Mapped[str] = mapped_column(
        String(100), ForeignKey("content_items.id", ondelete="CASCADE"), primary_key=True
    )
    topic_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("topics.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    source: Mapped[TopicSource] = mapped_column(
        Enum(
            TopicSource,
            values_callable=enum_values,
            name="topicsource",
            native_enum=False,
            length=10,
        ),
        primary_key=True,
    )

    item: Mapped["ContentItem"] = relationship(back_populates="topic_links")
    topic: Mapped["Topic"] = relationship()


from scout.models.content import ContentItem  # noqa: E402
