from __future__ import annotations

from typing import Iterable

from .metrics import AVAILABILITY_CACHE_HITS, AVAILABILITY_CACHE_MISSES
from .types import CountryAvailability


class AvailabilityCache:
    """Item id -> resolved country availability for the life of the process.

    No TTL and no eviction; fine for one user session, unbounded otherwise.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[CountryAvailability, ...]] = {}

    def get(self, item_id: str) -> tuple[CountryAvailability, ...] | None:
        value = self._entries.get(item_id)
        if value:
            AVAILABILITY_CACHE_HITS.inc()
        else:
            AVAILABILITY_CACHE_MISSES.inc()
        return value

    def put(self, item_id: str, availability: Iterable[CountryAvailability]) -> tuple[CountryAvailability, ...]:
        value = tuple(availability)
        self._entries[item_id] = value
        return value

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
