"""The sync worker: the only place sync jobs are executed.

A single worker per process polls the job store, runs at most one job at a
time across all tenants, and owns every status change of the jobs it runs.
Orphaned jobs from a previous process are failed once at startup, before the
loop begins.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from scout.core.datetime_utils import utc_now
from scout.core.exceptions import ConfigurationError
from scout.core.logging import get_logger
from scout.core.progress import ProgressTracker
from scout.ingest.base import PlatformFetcher
from scout.ingest.orchestrator import IngestionOrchestrator
from scout.models import INTERRUPTED_MESSAGE, JobStatus, SyncJob
from scout.stores.content import ContentStore
from scout.stores.jobs import JobStore

logger = get_logger(__name__)

# Called after a completed initial scrape with (tenant_id)
AfterScrapeHook = Callable[[str], Awaitable[None]]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Running:
    job_id: int


WorkerState = Idle | Running


class SyncWorker:
    def __init__(
        self,
        jobs: JobStore,
        content: ContentStore,
        orchestrator: IngestionOrchestrator,
        fetchers: dict[str, PlatformFetcher],
        progress: ProgressTracker | None = None,
        tenants: list[str] | None = None,
        poll_interval_seconds: float = 5.0,
        post_job_delay_seconds: float = 1.0,
        after_initial_scrape: AfterScrapeHook | None = None,
    ) -> None:
        self.jobs = jobs
        self.content = content
        self.orchestrator = orchestrator
        self.fetchers = fetchers
        self.progress = progress or ProgressTracker()
        self.tenants = tenants or ["default"]
        self.poll_interval_seconds = poll_interval_seconds
        self.post_job_delay_seconds = post_job_delay_seconds
        self.after_initial_scrape = after_initial_scrape

        self._state: WorkerState = Idle()
        self._stop = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def recover_orphaned_jobs(self) -> int:
        """Fail jobs left pending or running by a previous process."""
        return await self.jobs.fail_orphaned(INTERRUPTED_MESSAGE)

    async def start(self) -> None:
        """Recover orphans, then start the polling loop as a background task."""
        if self.is_running:
            return
        await self.recover_orphaned_jobs()
        self._stop.clear()
        self._task = asyncio.create_task(self._run_loop(), name="sync-worker")
        logger.bind(tenants=self.tenants).info("sync_worker_started")

    async def stop(self) -> None:
        """Signal the loop to stop and wait for it; a job in flight finishes first."""
        if self._task is None:
            return
        self._stop.set()
        await self._task
        self._task = None
        logger.info("sync_worker_stopped")

    async def _run_loop(self) -> None:
        while not self._stop.is_set():
            try:
                ran = await self.try_run_next()
            except Exception as e:
                # Job store unavailable or similar; keep polling
                logger.bind(error=str(e)).error("sync_worker_poll_failed")
                ran = False

            delay = self.post_job_delay_seconds if ran else self.poll_interval_seconds
            if not ran:
                logger.debug("sync_worker_idle")
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=delay)
            except TimeoutError:
                pass

    async def _tenant_order(self) -> list[str]:
        """Configured tenants first, then any other tenant with pending jobs."""
        extra = [t for t in await self.jobs.tenants() if t not in self.tenants]
        return [*self.tenants, *sorted(extra)]

    async def try_run_next(self) -> bool:
        """
        Run the next pending job, if any, to completion.

        Returns:
            True if a job ran; False if none was pending or a job is in flight
        """
        if isinstance(self._state, Running):
            return False

        for tenant_id in await self._tenant_order():
            job = await self.jobs.next_pending(tenant_id)
            if job is not None:
                await self.execute(job)
                return True
        return False

    async def execute(self, job: SyncJob) -> None:
        """
        Execute one job; every exception ends as a failed job, never a crash.

        The job's error_message carries the exception message verbatim, or the
        exception type when the message is empty.
        """
        self._state = Running(job.id)
        log = logger.bind(job_id=job.id, tenant_id=job.tenant_id, handle=job.handle)
        completed = False
        try:
            await self.jobs.update(job.id, status=JobStatus.RUNNING, started_at=utc_now())
            log.info("sync_job_started")
            await self._sync(job)
            completed = True
        except Exception as e:
            # Some exceptions (bare timeouts) carry no message
            message = str(e) or type(e).__name__
            log.bind(error=message).error("sync_job_failed")
            await self.jobs.update(
                job.id, status=JobStatus.FAILED, completed_at=utc_now(), error_message=message
            )
        finally:
            self.progress.clear(job.id)
            self._state = Idle()

        if completed and job.is_initial_scrape and self.after_initial_scrape:
            try:
                await self.after_initial_scrape(job.tenant_id)
            except Exception as e:
                log.bind(error=str(e)).error("post_scrape_hook_failed")

    async def _sync(self, job: SyncJob) -> None:
        report = self.progress.sink(job.id)

        fetcher = self.fetchers.get(job.platform)
        if fetcher is None:
            raise ConfigurationError(f"Unsupported platform: {job.platform}")
        fetcher.check_credentials()

        report("Getting channel info")
        result = await fetcher.fetch(job.handle, job.lookback_days)
        profile = result.profile

        channel = await self.content.upsert_channel(
            profile, job.tenant_id, initial_scrape_running=True
        )
        try:
            report("Processing items", 0, len(result.items))
            ingest = await self.orchestrator.ingest_items(result.items, job.platform, report)
        finally:
            await self.content.set_initial_scrape_running(channel.id, False)

        await self.jobs.update(
            job.id,
            status=JobStatus.COMPLETED,
            completed_at=utc_now(),
            channel_id=channel.id,
            channel_title=channel.title,
            items_found=len(result.items),
            items_processed=ingest.processed_count,
            new_items=ingest.new_count,
            updated_items=ingest.updated_count,
        )
        logger.bind(
            job_id=job.id,
            channel_id=channel.id,
            new=ingest.new_count,
            updated=ingest.updated_count,
        ).info("sync_job_completed")
