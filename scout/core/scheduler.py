"""
APScheduler integration for FastAPI.

Periodic work that feeds the sync worker and keeps graphs fresh:
- Resync channels: enqueues a non-initial sync job for every active channel
  (daily, resync_time_utc)
- Rebuild graphs: recomputes every tenant's topic graph (hourly)

Schedules live in memory; they are re-registered on every start.
"""

from typing import Any

from apscheduler import AsyncScheduler, ConflictPolicy, JobOutcome, JobReleased
from apscheduler.datastores.memory import MemoryDataStore
from apscheduler.triggers.cron import CronTrigger

from scout.config import get_config, get_settings
from scout.core.logging import get_logger

logger = get_logger(__name__)

# Global scheduler instance
scheduler: AsyncScheduler | None = None


async def resync_channels_job() -> dict[str, int]:
    """Enqueue a lookback sync for every active channel of every tenant."""
    from scout.stores.jobs import JobSpec
    from scout.worker.factory import get_services

    services = get_services()
    lookback_days = services.config.schedules.resync_lookback_days
    logger.info("scheduled_resync_started")

    enqueued = 0
    try:
        for channel in await services.content.list_channels(active_only=True):
            await services.jobs.enqueue(
                JobSpec(
                    handle=channel.handle,
                    platform=channel.platform,
                    tenant_id=channel.tenant_id,
                    lookback_days=lookback_days,
                    is_initial_scrape=False,
                )
            )
            enqueued += 1
    except Exception as e:
        logger.bind(error=str(e), enqueued=enqueued).error("scheduled_resync_failed")
        raise  # Re-raise so APScheduler records the failure

    logger.bind(enqueued=enqueued, lookback_days=lookback_days).info("scheduled_resync_completed")
    return {"enqueued": enqueued}


async def rebuild_graphs_job() -> dict[str, int]:
    """Recompute the topic graph of every tenant that owns channels."""
    from scout.worker.factory import get_services

    services = get_services()
    rebuilt = 0
    for tenant_id in await services.content.tenants():
        try:
            await services.rebuild_graph(tenant_id)
            rebuilt += 1
        except Exception as e:
            logger.bind(tenant_id=tenant_id, error=str(e)).error("scheduled_graph_rebuild_failed")
    logger.bind(rebuilt=rebuilt).info("scheduled_graph_rebuild_completed")
    return {"rebuilt": rebuilt}


def _parse_time(value: str) -> tuple[int, int]:
    """Parse "HH:MM" into (hour, minute), defaulting to 04:00."""
    try:
        hour, minute = value.split(":")
        return int(hour), int(minute)
    except ValueError:
        return 4, 0


async def start_scheduler() -> AsyncScheduler | None:
    """Initialize and start the scheduler."""
    global scheduler

    settings = get_settings()
    if not settings.scheduler_enabled:
        logger.info("scheduler_disabled_by_config")
        return None

    schedules = get_config().schedules
    scheduler = AsyncScheduler(data_store=MemoryDataStore())

    # Start the scheduler first (required before calling other methods in APScheduler 4.x)
    await scheduler.__aenter__()
    scheduler.subscribe(_on_job_released, {JobReleased})

    registered: list[str] = []
    if schedules.resync_enabled:
        hour, minute = _parse_time(schedules.resync_time_utc)
        await scheduler.add_schedule(
            resync_channels_job,
            CronTrigger(hour=hour, minute=minute),
            id="resync_channels",
            conflict_policy=ConflictPolicy.replace,
        )
        registered.append("resync_channels")

    if schedules.graph_rebuild_enabled:
        await scheduler.add_schedule(
            rebuild_graphs_job,
            CronTrigger(minute=schedules.graph_rebuild_minute),
            id="rebuild_graphs",
            conflict_policy=ConflictPolicy.replace,
        )
        registered.append("rebuild_graphs")

    await scheduler.start_in_background()
    logger.bind(jobs=registered).info("scheduler_started")
    return scheduler


async def _on_job_released(event: Any) -> None:
    """Log the outcome of every scheduled run."""
    if not isinstance(event, JobReleased):
        return
    if event.outcome == JobOutcome.success:
        logger.bind(schedule_id=event.schedule_id).info("scheduled_job_succeeded")
    else:
        logger.bind(
            schedule_id=event.schedule_id,
            outcome=event.outcome.name,
            error=getattr(event, "exception_message", None),
        ).error("scheduled_job_failed")


async def stop_scheduler() -> None:
    """Gracefully stop the scheduler."""
    global scheduler
    if scheduler:
        await scheduler.__aexit__(None, None, None)
        logger.info("scheduler_stopped")
        scheduler = None


async def get_job_schedules() -> list[dict[str, Any]]:
    """Get all registered job schedules."""
    if not scheduler:
        return []

    schedules = await scheduler.get_schedules()
    return [
        {
            "id": s.id,
            "task_id": s.task_id,
            "trigger": str(s.trigger),
            "next_fire_time": s.next_fire_time.isoformat() if s.next_fire_time else None,
            "last_fire_time": s.last_fire_time.isoformat() if s.last_fire_time else None,
        }
        for s in schedules
    ]
