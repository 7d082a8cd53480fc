"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import directory, health, map_view, trips
from .config import settings
from .services.session import TripMapSession, build_session

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    session: TripMapSession = app.state.session
    await session.renderer.drain()
    await session.aclose()


def create_app(session: TripMapSession | None = None) -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        root_path="",
        lifespan=_lifespan,
    )
    # One map surface per running app.
    app.state.session = session or build_session()

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
            "map": f"{settings.api_prefix}/map",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(directory.router, prefix=settings.api_prefix)
    app.include_router(trips.router, prefix=settings.api_prefix)
    app.include_router(map_view.router, prefix=settings.api_prefix)
    return app


app = create_app()
