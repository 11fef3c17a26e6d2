from fastapi import APIRouter, Depends, Query

from ..coordinator import WatchlistCoordinator
from ..deps import get_coordinator
from ..schemas import CatalogItemOut, SearchResponse, Usage
from .utils import usage_of

router = APIRouter(tags=["search"])


@router.get("/search", response_model=SearchResponse)
async def search(
    title: str = Query(default=""),
    coordinator: WatchlistCoordinator = Depends(get_coordinator),
):
    items = await coordinator.search(title)
    return SearchResponse(
        query=title.strip(),
        items=[CatalogItemOut.of(i, saved=coordinator.is_saved(i)) for i in items],
        error=coordinator.error_message,
        usage=usage_of(coordinator),
    )


@router.get("/usage", response_model=Usage)
async def usage(coordinator: WatchlistCoordinator = Depends(get_coordinator)):
    return usage_of(coordinator)
