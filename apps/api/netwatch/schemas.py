from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field

from .types import CatalogItem, CountryAvailability


class CountryAvailabilityOut(BaseModel):
    country_code: str
    country: str
    audio: str
    subtitle: str

    @classmethod
    def of(cls, a: CountryAvailability) -> "CountryAvailabilityOut":
        return cls(country_code=a.country_code, country=a.country, audio=a.audio, subtitle=a.subtitle)


class CatalogItemOut(BaseModel):
    item_id: str
    title: str
    img: str
    synopsis: str
    availability: Optional[List[CountryAvailabilityOut]] = None
    is_saved_item: bool = False
    saved: bool = False

    @classmethod
    def of(cls, item: CatalogItem, saved: bool = False) -> "CatalogItemOut":
        return cls(
            item_id=item.item_id,
            title=item.title,
            img=item.img,
            synopsis=item.synopsis,
            availability=[CountryAvailabilityOut.of(a) for a in item.availability] if item.availability is not None else None,
            is_saved_item=item.is_saved_item,
            saved=saved,
        )


class Usage(BaseModel):
    calls_used: int
    calls_remaining: int
    daily_allowance: int


class SearchResponse(BaseModel):
    query: str
    items: List[CatalogItemOut]
    error: Optional[str] = None
    usage: Usage


class AvailabilityResponse(BaseModel):
    item_id: str
    availability: List[CountryAvailabilityOut]
    usage: Usage


class WatchlistAdd(BaseModel):
    item_id: str
    title: Optional[str] = None
    img: str = ""
    synopsis: str = ""
    availability: Optional[List[CountryAvailabilityOut]] = None

    def to_item(self) -> CatalogItem:
        return CatalogItem(
            item_id=self.item_id,
            title=self.title or "",
            img=self.img,
            synopsis=self.synopsis,
            availability=tuple(
                CountryAvailability(a.country_code, a.country, a.audio, a.subtitle)
                for a in self.availability
            ) if self.availability is not None else None,
        )


class WatchlistResponse(BaseModel):
    items: List[CatalogItemOut]
    error: Optional[str] = None


class WatchlistMutation(BaseModel):
    item_id: Optional[str] = None
    saved: bool
    state: str
    watchlist: WatchlistResponse = Field(default_factory=lambda: WatchlistResponse(items=[]))
