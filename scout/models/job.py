"""Sync job model: one request to fetch and ingest a channel's recent items."""

import enum
from datetime import datetime

from sqlalchemy import Boolean, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scout.models.base import Base, TimestampMixin, enum_values


class JobStatus(str, enum.Enum):
    """Sync job lifecycle states."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# Forward-only lifecycle. pending -> failed is reserved for the orphan sweep.
ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.RUNNING}),
    JobStatus.RUNNING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}

ORPHANED_STATUSES = (JobStatus.PENDING, JobStatus.RUNNING)

INTERRUPTED_MESSAGE = "Job was interrupted by server restart"


class SyncJob(Base, TimestampMixin):
    """A queued, running or finished channel sync."""

    __tablename__ = "sync_jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    handle: Mapped[str] = mapped_column(String(255))
    platform: Mapped[str] = mapped_column(String(20), default="youtube")
    tenant_id: Mapped[str] = mapped_column(String(100), default="default", index=True)
    status: Mapped[JobStatus] = mapped_column(
        Enum(
            JobStatus,
            values_callable=enum_values,
            name="jobstatus",
            native_enum=False,
            length=20,
        ),
        default=JobStatus.PENDING,
        index=True,
    )
    lookback_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_initial_scrape: Mapped[bool] = mapped_column(Boolean, default=False)

    started_at: Mapped[datetime | None] = mapped_column(nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Results, filled in on completion
    channel_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    channel_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    items_found: Mapped[int] = mapped_column(Integer, default=0)
    items_processed: Mapped[int] = mapped_column(Integer, default=0)
    new_items: Mapped[int] = mapped_column(Integer, default=0)
    updated_items: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<SyncJob {self.id} {self.platform}:{self.handle} {self.status.value}>"
