from __future__ import annotations

from fastapi import FastAPI

from .coordinator import WatchlistCoordinator
from .logging_setup import configure_logging
from .metrics import BUILD_INFO, router as metrics_router
from .middleware import RequestIdAndTimingMiddleware
from .routers import health, search, titles, watchlist
from .settings import settings


def create_app(coordinator: WatchlistCoordinator | None = None) -> FastAPI:
    """Build the API; a coordinator is created on first use unless one is given."""
    app = FastAPI(title="Netflix Watchlist API", version=settings.app_version)
    app.add_middleware(RequestIdAndTimingMiddleware)
    if coordinator is not None:
        app.state.coordinator = coordinator

    app.include_router(health.router)
    app.include_router(search.router)
    app.include_router(titles.router)
    app.include_router(watchlist.router)
    app.include_router(metrics_router)
    return app


configure_logging()
BUILD_INFO.labels(version=settings.app_version, sha=settings.git_sha or "-", env=settings.environment).set(1)
app = create_app()
