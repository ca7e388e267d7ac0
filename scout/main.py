from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from scout.api.router import api_router
from scout.config import get_settings
from scout.core.logging import setup_logging
from scout.core.scheduler import start_scheduler, stop_scheduler
from scout.worker.factory import get_services

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    # Startup
    setup_logging()
    worker = get_services().worker
    if settings.worker_enabled:
        # Fails orphaned jobs before the loop starts
        await worker.start()
    await start_scheduler()
    yield
    # Shutdown
    await stop_scheduler()
    await worker.stop()


app = FastAPI(
    title="Channel Scout",
    description="Creator channel tracking, topic engagement graph and channel suggestions",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
)

# Include API routes
app.include_router(api_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint for load balancers."""
    return {"status": "healthy"}
