"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import assignments, health, routes, technicians
from .config import settings
from .data.supabase_repository import DataProviderError, SupabaseDispatchRepository
from .db.supabase import get_supabase_client
from .services.tracking.synchronizer import TechnicianLocationSynchronizer

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


class _UnconfiguredSource:
    """Stand-in data source used when Supabase credentials are missing."""

    async def fetch_roster(self):
        raise DataProviderError("Supabase not configured")

    async def fetch_latest_location(self, technician_id: str):
        raise DataProviderError("Supabase not configured")

    async def fetch_active_jobs(self, technician_id: str):
        raise DataProviderError("Supabase not configured")

    async def subscribe(self, callback):
        raise DataProviderError("Supabase not configured")


async def build_synchronizer() -> tuple[TechnicianLocationSynchronizer, bool]:
    """Create the synchronizer for the configured Supabase project.

    Returns the synchronizer and whether it has a live data source.
    """
    client = await get_supabase_client()
    if client is None:
        source = _UnconfiguredSource()
        return TechnicianLocationSynchronizer(source, source, source), False
    repository = SupabaseDispatchRepository(client)
    return TechnicianLocationSynchronizer(repository, repository, repository), True


def create_app(synchronizer: TechnicianLocationSynchronizer | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        sync = app.state.synchronizer
        configured = True
        if sync is None:
            sync, configured = await build_synchronizer()
            app.state.synchronizer = sync

        if configured:
            await sync.start(
                poll_interval_ms=settings.poll_interval_ms,
                enable_realtime=settings.enable_realtime,
            )
        else:
            logger.warning("Technician location sync disabled: Supabase is not configured")
            await sync.refresh()
        try:
            yield
        finally:
            await sync.stop()

    app = FastAPI(
        title=settings.app_name,
        root_path="",
        lifespan=lifespan,
    )
    app.state.synchronizer = synchronizer

    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(technicians.router, prefix=settings.api_prefix)
    app.include_router(routes.router, prefix=settings.api_prefix)
    app.include_router(assignments.router, prefix=settings.api_prefix)
    return app


app = create_app()
