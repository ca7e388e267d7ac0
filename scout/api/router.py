from fastapi import APIRouter

from scout.api.channels import router as channels_router
from scout.api.jobs import router as jobs_router
from scout.api.suggestions import router as suggestions_router
from scout.api.topics import router as topics_router

api_router = APIRouter()

# API routes at /api/*
api_router.include_router(jobs_router, prefix="/api", tags=["jobs"])
api_router.include_router(channels_router, prefix="/api", tags=["channels"])
api_router.include_router(topics_router, prefix="/api", tags=["topics"])
api_router.include_router(suggestions_router, prefix="/api", tags=["suggestions"])
