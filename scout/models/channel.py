from sqlalchemy import JSON, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scout.models.base import Base, TimestampMixin


class Channel(Base, TimestampMixin):
    """A tracked creator channel on one platform."""

    __tablename__ = "channels"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    # First tenant to sync a channel owns it
    tenant_id: Mapped[str] = mapped_column(String(100), default="default", index=True)
    handle: Mapped[str] = mapped_column(String(255), index=True)
    platform: Mapped[str] = mapped_column(String(20), index=True)
    title: Mapped[str] = mapped_column(String(500))
    follower_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    posts_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    follows_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    biography: Mapped[str | None] = mapped_column(Text, nullable=True)
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    external_urls: Mapped[list] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    initial_scrape_running: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<Channel {self.id}: {self.title[:50]}>"
