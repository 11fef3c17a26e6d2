from __future__ import annotations

from fastapi import Request

from .coordinator import WatchlistCoordinator
from .db import make_engine
from .providers.unogs import UnogsClient
from .settings import Settings, settings as default_settings
from .store import WatchlistStore
from .usage import UsageCounter


def build_coordinator(cfg: Settings | None = None) -> WatchlistCoordinator:
    """Wire the engine, usage counter, catalog client and store together."""
    cfg = cfg or default_settings
    engine = make_engine(cfg.resolved_database_url())
    usage = UsageCounter(engine, allowance=cfg.daily_call_allowance)
    client = UnogsClient(cfg, usage)
    return WatchlistCoordinator(client, WatchlistStore(engine))


def get_coordinator(request: Request) -> WatchlistCoordinator:
    state = request.app.state
    coordinator = getattr(state, "coordinator", None)
    if coordinator is None:
        coordinator = build_coordinator()
        state.coordinator = coordinator
    return coordinator
