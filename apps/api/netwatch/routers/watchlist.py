from fastapi import APIRouter, Depends, HTTPException

from ..coordinator import WatchlistCoordinator
from ..deps import get_coordinator
from ..schemas import WatchlistAdd, WatchlistMutation, WatchlistResponse
from .utils import watchlist_of

router = APIRouter(tags=["watchlist"])


@router.get("/watchlist", response_model=WatchlistResponse)
async def list_watchlist(coordinator: WatchlistCoordinator = Depends(get_coordinator)):
    coordinator.fetch_saved_items()
    return watchlist_of(coordinator)


@router.post("/watchlist", response_model=WatchlistMutation)
async def add_to_watchlist(
    payload: WatchlistAdd,
    coordinator: WatchlistCoordinator = Depends(get_coordinator),
):
    item = coordinator.find_item(payload.item_id)
    if item is None:
        if payload.title is None:
            raise HTTPException(status_code=404, detail="Title not found; search for it first")
        item = payload.to_item()
    coordinator.save_to_watchlist(item)
    return WatchlistMutation(
        item_id=item.item_id,
        saved=coordinator.is_saved(item),
        state=coordinator.state_of(item).value,
        watchlist=watchlist_of(coordinator),
    )


@router.delete("/watchlist/{item_id}", response_model=WatchlistMutation)
async def remove_from_watchlist(
    item_id: str,
    coordinator: WatchlistCoordinator = Depends(get_coordinator),
):
    # No-op if not present
    coordinator.remove_from_watchlist(item_id)
    return WatchlistMutation(
        item_id=item_id,
        saved=coordinator.is_saved(item_id),
        state=coordinator.state_of(item_id).value,
        watchlist=watchlist_of(coordinator),
    )


@router.delete("/watchlist", response_model=WatchlistMutation)
async def clear_watchlist(coordinator: WatchlistCoordinator = Depends(get_coordinator)):
    coordinator.clear_watchlist()
    return WatchlistMutation(saved=False, state="cleared", watchlist=watchlist_of(coordinator))
