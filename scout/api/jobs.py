"""Sync job API endpoints."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from scout.core.scheduler import get_job_schedules
from scout.dependencies import ServicesDep
from scout.models import SyncJob
from scout.stores.jobs import JobSpec
from scout.worker.loop import Running

router = APIRouter()


class JobCreate(BaseModel):
    """Request body for submitting a sync job."""

    handle: str = Field(min_length=1, max_length=255)
    platform: str = Field(default="youtube", pattern="^(youtube|instagram)$")
    tenant_id: str = Field(default="default", min_length=1, max_length=100)
    lookback_days: int | None = Field(default=None, ge=1, le=3650)
    is_initial_scrape: bool = False


class ProgressResponse(BaseModel):
    step: str
    current: int | None
    total: int | None
    updated_at: str


class JobResponse(BaseModel):
    """Response model for a sync job."""

    id: int
    handle: str
    platform: str
    tenant_id: str
    status: str
    created_at: datetime
    started_at: datetime | None
    completed_at: datetime | None
    error_message: str | None
    lookback_days: int | None
    is_initial_scrape: bool
    channel_id: str | None
    channel_title: str | None
    items_found: int
    items_processed: int
    new_items: int
    updated_items: int
    progress: ProgressResponse | None = None


class ScheduleResponse(BaseModel):
    """Response model for a periodic schedule."""

    id: str
    task_id: str
    trigger: str
    next_fire_time: str | None
    last_fire_time: str | None


class WorkerResponse(BaseModel):
    running: bool
    state: str
    job_id: int | None
    tenants: list[str]
    jobs_by_status: dict[str, int]


def _job_response(job: SyncJob, progress: Any = None) -> JobResponse:
    return JobResponse(
        id=job.id,
        handle=job.handle,
        platform=job.platform,
        tenant_id=job.tenant_id,
        status=job.status.value,
        created_at=job.created_at,
        started_at=job.started_at,
        completed_at=job.completed_at,
        error_message=job.error_message,
        lookback_days=job.lookback_days,
        is_initial_scrape=job.is_initial_scrape,
        channel_id=job.channel_id,
        channel_title=job.channel_title,
        items_found=job.items_found,
        items_processed=job.items_processed,
        new_items=job.new_items,
        updated_items=job.updated_items,
        progress=ProgressResponse(**progress.to_dict()) if progress else None,
    )


@router.post("/jobs", response_model=JobResponse, status_code=status.HTTP_202_ACCEPTED)
async def submit_job(body: JobCreate, services: ServicesDep) -> JobResponse:
    """Queue a channel sync; the worker picks it up in submission order."""
    job_id = await services.jobs.enqueue(JobSpec(**body.model_dump()))
    job = await services.jobs.get(job_id)
    if job is None:
        raise HTTPException(status_code=500, detail="Job was not stored")
    return _job_response(job)


@router.get("/jobs", response_model=list[JobResponse])
async def list_jobs(
    services: ServicesDep,
    tenant_id: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> list[JobResponse]:
    """List jobs, most recent first."""
    jobs = await services.jobs.list_jobs(limit=limit, offset=offset, tenant_id=tenant_id)
    return [_job_response(job, services.progress.get(job.id)) for job in jobs]


@router.get("/jobs/schedules", response_model=list[ScheduleResponse])
async def list_schedules() -> list[ScheduleResponse]:
    """List the registered periodic schedules."""
    schedules = await get_job_schedules()
    return [ScheduleResponse(**s) for s in schedules]


@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job(job_id: int, services: ServicesDep) -> JobResponse:
    """Get one job, with live progress while it runs."""
    job = await services.jobs.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return _job_response(job, services.progress.get(job.id))


@router.get("/worker", response_model=WorkerResponse)
async def worker_status(services: ServicesDep) -> WorkerResponse:
    """Current worker state and job counts."""
    worker = services.worker
    state = worker.state
    return WorkerResponse(
        running=worker.is_running,
        state="running" if isinstance(state, Running) else "idle",
        job_id=state.job_id if isinstance(state, Running) else None,
        tenants=worker.tenants,
        jobs_by_status=await services.jobs.count_by_status(),
    )
