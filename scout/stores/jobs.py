"""Persistent sync job queue.

Each method runs in its own session and commits before returning, so a
status change is durable the moment the call completes.
"""

from typing import Any

from pydantic import BaseModel, Field
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scout.core.database import AsyncSessionLocal
from scout.core.datetime_utils import utc_now
from scout.core.exceptions import InvalidJobTransitionError, JobNotFoundError
from scout.core.logging import get_logger
from scout.models.job import (
    ALLOWED_TRANSITIONS,
    INTERRUPTED_MESSAGE,
    ORPHANED_STATUSES,
    JobStatus,
    SyncJob,
)

logger = get_logger(__name__)

UPDATABLE_FIELDS = {
    "status",
    "started_at",
    "completed_at",
    "error_message",
    "channel_id",
    "channel_title",
    "items_found",
    "items_processed",
    "new_items",
    "updated_items",
}


class JobSpec(BaseModel):
    """Request to sync one channel."""

    handle: str = Field(min_length=1, max_length=255)
    platform: str = "youtube"
    tenant_id: str = "default"
    lookback_days: int | None = Field(default=None, ge=1)
    is_initial_scrape: bool = False


class JobStore:
    """Queue of sync jobs backed by the sync_jobs table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self.session_factory = session_factory or AsyncSessionLocal

    async def enqueue(self, spec: JobSpec) -> int:
        """Create a pending job and return its id."""
        async with self.session_factory() as db:
            job = SyncJob(
                handle=spec.handle,
                platform=spec.platform,
                tenant_id=spec.tenant_id,
                lookback_days=spec.lookback_days,
                is_initial_scrape=spec.is_initial_scrape,
                status=JobStatus.PENDING,
            )
            db.add(job)
            await db.commit()
            logger.bind(
                job_id=job.id, handle=spec.handle, platform=spec.platform, tenant_id=spec.tenant_id
            ).info("sync_job_enqueued")
            return job.id

    async def next_pending(self, tenant_id: str) -> SyncJob | None:
        """Oldest pending job of a tenant (creation time, then id)."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(SyncJob)
                .where(SyncJob.tenant_id == tenant_id, SyncJob.status == JobStatus.PENDING)
                .order_by(SyncJob.created_at.asc(), SyncJob.id.asc())
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def get(self, job_id: int) -> SyncJob | None:
        async with self.session_factory() as db:
            return await db.get(SyncJob, job_id)

    async def update(self, job_id: int, **fields: Any) -> SyncJob:
        """
        Update job fields, validating any status change.

        Args:
            job_id: Job to update
            **fields: Column values; status may be a JobStatus or its value

        Returns:
            The updated job

        Raises:
            JobNotFoundError: If the job does not exist
            InvalidJobTransitionError: If the status change is not forward-only
            ValueError: If a field is not updatable
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update job fields: {sorted(unknown)}")

        async with self.session_factory() as db:
            job = await db.get(SyncJob, job_id)
            if job is None:
                raise JobNotFoundError(f"Job {job_id} not found")

            if "status" in fields:
                requested = JobStatus(fields["status"])
                if requested != job.status and requested not in ALLOWED_TRANSITIONS[job.status]:
                    raise InvalidJobTransitionError(job_id, job.status.value, requested.value)
                fields["status"] = requested

            for name, value in fields.items():
                setattr(job, name, value)
            await db.commit()
            return job

    async def list_jobs(
        self, limit: int = 50, offset: int = 0, tenant_id: str | None = None
    ) -> list[SyncJob]:
        """Most recent jobs first."""
        async with self.session_factory() as db:
            query = select(SyncJob)
            if tenant_id:
                query = query.where(SyncJob.tenant_id == tenant_id)
            result = await db.execute(
                query.order_by(SyncJob.created_at.desc(), SyncJob.id.desc())
                .limit(limit)
                .offset(offset)
            )
            return list(result.scalars().all())

    async def list_orphaned(self) -> list[SyncJob]:
        """Jobs left pending or running, e.g. by a crashed process."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(SyncJob)
                .where(SyncJob.status.in_(ORPHANED_STATUSES))
                .order_by(SyncJob.id.asc())
            )
            return list(result.scalars().all())

    async def fail_orphaned(self, message: str = INTERRUPTED_MESSAGE) -> int:
        """
        Mark every pending or running job failed.

        This is the crash-recovery sweep and the only path allowed to move a
        job from pending straight to failed. Call it once at startup, before
        the worker loop begins.

        Returns:
            Number of jobs failed
        """
        async with self.session_factory() as db:
            result = await db.execute(
                update(SyncJob)
                .where(SyncJob.status.in_(ORPHANED_STATUSES))
                .values(
                    status=JobStatus.FAILED,
                    completed_at=utc_now(),
                    error_message=message,
                )
            )
            await db.commit()
            count = result.rowcount or 0

        if count:
            logger.bind(count=count).warning("orphaned_jobs_failed")
        return count

    async def tenants(self) -> list[str]:
        """Tenants with at least one pending job, ascending."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(SyncJob.tenant_id)
                .where(SyncJob.status == JobStatus.PENDING)
                .distinct()
                .order_by(SyncJob.tenant_id)
            )
            return list(result.scalars().all())

    async def count_by_status(self) -> dict[str, int]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(SyncJob.status, func.count()).group_by(SyncJob.status)
            )
            return {status.value: count for status, count in result.all()}
