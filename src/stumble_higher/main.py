"""Main entry point for the Stumble Higher application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from stumble_higher.api.v1 import (
    admin_router,
    discovery_router,
    resources_router,
    rewards_router,
    votes_router,
)
from stumble_higher.core.settings import settings
from stumble_higher.services.worker import ScoringWorker

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Curated content discovery with community-weighted quality scoring",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(votes_router, prefix="/api/v1")
app.include_router(resources_router, prefix="/api/v1")
app.include_router(discovery_router, prefix="/api/v1")
app.include_router(rewards_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    if settings.scoring_worker_enabled:
        worker = ScoringWorker()
        await worker.start()
        app.state.scoring_worker = worker
        logger.info("Scoring worker started")
    else:
        app.state.scoring_worker = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: ScoringWorker | None = getattr(app.state, "scoring_worker", None)
    if worker:
        await worker.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Curated content discovery with community-weighted quality scoring",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("stumble_higher.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
