from enum import Enum

from fastapi import APIRouter, Depends, Query

from ..coordinator import WatchlistCoordinator
from ..deps import get_coordinator
from ..schemas import AvailabilityResponse, CountryAvailabilityOut
from ..types import CatalogItem
from .utils import usage_of

router = APIRouter(tags=["titles"])


class DetailSource(str, Enum):
    search = "search"
    watchlist = "watchlist"


@router.get("/titles/{item_id}/availability", response_model=AvailabilityResponse)
async def title_availability(
    item_id: str,
    source: DetailSource = Query(default=DetailSource.search),
    coordinator: WatchlistCoordinator = Depends(get_coordinator),
):
    item = coordinator.find_item(item_id) or CatalogItem(item_id=item_id, title="", img="", synopsis="")
    if source is DetailSource.watchlist and not item.is_saved_item:
        item = item.as_saved()
    availability = await coordinator.fetch_availability(item)
    return AvailabilityResponse(
        item_id=item_id,
        availability=[CountryAvailabilityOut.of(a) for a in availability],
        usage=usage_of(coordinator),
    )
