from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Any, Iterable


@dataclass(frozen=True)
class CountryAvailability:
    country_code: str
    country: str
    audio: str
    subtitle: str

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "CountryAvailability":
        return cls(
            country_code=_text(raw.get("country_code")),
            country=_text(raw.get("country")),
            audio=_text(raw.get("audio")),
            subtitle=_text(raw.get("subtitle")),
        )


@dataclass(frozen=True)
class CatalogItem:
    item_id: str
    title: str
    img: str
    synopsis: str
    availability: tuple[CountryAvailability, ...] | None = None
    # set on items hydrated from the watchlist; never persisted
    is_saved_item: bool = False

    def with_availability(self, availability: Iterable[CountryAvailability]) -> "CatalogItem":
        return replace(self, availability=tuple(availability))

    def as_saved(self) -> "CatalogItem":
        return replace(self, is_saved_item=True)


class WatchState(str, enum.Enum):
    UNSAVED = "unsaved"
    PENDING = "pending"
    SAVED = "saved"
    REMOVING = "removing"


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""
