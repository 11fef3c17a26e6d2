from ..coordinator import WatchlistCoordinator
from ..schemas import CatalogItemOut, Usage, WatchlistResponse


def usage_of(coordinator: WatchlistCoordinator) -> Usage:
    coordinator.refresh_usage()
    return Usage(
        calls_used=coordinator.calls_used,
        calls_remaining=coordinator.calls_remaining,
        daily_allowance=coordinator.client.usage.allowance,
    )


def watchlist_of(coordinator: WatchlistCoordinator) -> WatchlistResponse:
    return WatchlistResponse(
        items=[CatalogItemOut.of(i, saved=True) for i in coordinator.watchlist_items()],
        error=coordinator.error_message,
    )
