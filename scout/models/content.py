import enum
from datetime import datetime

from sqlalchemy import JSON, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scout.core.datetime_utils import utc_now
from scout.models.base import Base, enum_values


class Platform(str, enum.Enum):
    """Supported content platforms."""

    YOUTUBE = "youtube"
    INSTAGRAM = "instagram"


class TranscriptionStatus(str, enum.Enum):
    """How far enrichment got for an item's audio."""

    PENDING = "pending"
    AUDIO_READY = "audio_ready"
    COMPLETED = "completed"
    ERROR = "error"


class ContentItem(Base):
    """A published item (video, reel, post) from a tracked channel.

    The id is platform-qualified ("yt_<videoId>", "ig_<shortCode>") and is
    the idempotency key for ingestion.
    """

    __tablename__ = "content_items"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    channel_id: Mapped[str] = mapped_column(
        String(100), ForeignKey("channels.id", ondelete="CASCADE"), index=True
    )
    platform: Mapped[str] = mapped_column(String(20), index=True)
    title: Mapped[str] = mapped_column(String(500), default="")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(nullable=True, index=True)

    # Engagement, refreshed on every sync
    view_count: Mapped[int] = mapped_column(Integer, default=0)
    like_count: Mapped[int] = mapped_column(Integer, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, default=0)
    last_synced_at: Mapped[datetime] = mapped_column(default=utc_now)

    # Media and enrichment, written once
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    media_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    display_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    local_image_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    transcription: Mapped[str | None] = mapped_column(Text, nullable=True)
    transcription_status: Mapped[TranscriptionStatus] = mapped_column(
        Enum(
            TranscriptionStatus,
            values_callable=enum_values,
            name="transcriptionstatus",
            native_enum=False,
            length=20,
        ),
        default=TranscriptionStatus.PENDING,
    )
    raw: Mapped[dict] = mapped_column(JSON, default=dict)

    topic_links: Mapped[list["ItemTopic"]] = relationship(
        back_populates="item", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<ContentItem {self.id}: {self.title[:50]}>"


from scout.models.topic import ItemTopic  # noqa: E402
