"""Search, availability and watchlist state for one user session.

The coordinator is the only writer of its fields. It must be driven from a
single event loop; catalog calls are pushed to worker threads with
``asyncio.to_thread`` and their results are applied back on the loop.
Store calls stay on the loop since the database is local.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from .cache import AvailabilityCache
from .errors import PersistenceError, SearchError
from .metrics import STALE_SEARCHES_DISCARDED
from .models import SavedItem
from .providers.unogs import UnogsClient
from .store import WatchlistStore
from .types import CatalogItem, CountryAvailability, WatchState

logger = logging.getLogger(__name__)


class SearchTicket:
    """Identifies one search call; cancelled when a newer search starts."""

    def __init__(self, query: str):
        self.query = query
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class WatchlistCoordinator:
    def __init__(self, client: UnogsClient, store: WatchlistStore):
        self.client = client
        self.store = store

        self.search_results: list[CatalogItem] = []
        self.error_message: str | None = None
        self.selected_availability: list[CountryAvailability] = []
        self.saved_items: list[SavedItem] = []
        self.calls_used = 0
        self.calls_remaining = 0

        self._states: dict[str, WatchState] = {}
        self._availability = AvailabilityCache()
        self._search_ticket: SearchTicket | None = None
        self._selected_item_id: str | None = None

        self.fetch_saved_items()
        self.refresh_usage()

    def state_of(self, item: CatalogItem | str) -> WatchState:
        return self._states.get(_id(item), WatchState.UNSAVED)

    def is_saved(self, item: CatalogItem | str) -> bool:
        return self.state_of(item) in (WatchState.PENDING, WatchState.SAVED)

    def watchlist_items(self) -> list[CatalogItem]:
        return [s.to_catalog_item() for s in self.saved_items]

    def find_item(self, item_id: str) -> CatalogItem | None:
        for item in self.search_results:
            if item.item_id == item_id:
                return item
        for item in self.watchlist_items():
            if item.item_id == item_id:
                return item
        return None

    def cached_availability(self, item_id: str) -> tuple[CountryAvailability, ...] | None:
        return self._availability.get(item_id)

    def refresh_usage(self) -> None:
        self.calls_used = self.client.calls_used
        self.calls_remaining = self.client.calls_remaining

    async def search(self, title: str) -> list[CatalogItem]:
        query = title.strip()
        if self._search_ticket is not None:
            self._search_ticket.cancel()
            self._search_ticket = None
        if not query:
            self.search_results = []
            self.error_message = None
            return []

        ticket = SearchTicket(query)
        self._search_ticket = ticket
        self.search_results = []

        error: SearchError | None = None
        try:
            items = await asyncio.to_thread(self.client.search, query)
        except SearchError as e:
            items, error = [], e

        self.refresh_usage()
        if ticket.cancelled:
            STALE_SEARCHES_DISCARDED.inc()
            logger.info("search_discarded", extra={"query": ticket.query})
            return list(self.search_results)
        self._search_ticket = None

        if error is not None:
            self.search_results = []
            self.error_message = error.user_message(query)
            logger.info("search_failed", extra={"query": query, "error": error.__class__.__name__})
        else:
            self.search_results = items
            self.error_message = None
        self._merge_cached_availability()
        return list(self.search_results)

    async def fetch_availability(self, item: CatalogItem) -> list[CountryAvailability]:
        """Resolve availability: cache, then embedded data, then the network.

        Watchlist items never reach the network.
        """
        item_id = item.item_id
        self._selected_item_id = item_id

        cached = self._availability.get(item_id)
        if cached:
            return self._select(item_id, cached)
        if item.availability:
            self._remember_availability(item_id, item.availability)
            return self._select(item_id, item.availability)
        if item.is_saved_item:
            return self._select(item_id, item.availability or cached or ())

        fetched = await asyncio.to_thread(self.client.fetch_availability, item_id, True)
        self._remember_availability(item_id, fetched)
        self.refresh_usage()
        return self._select(item_id, fetched)

    def _select(self, item_id: str, availability: Iterable[CountryAvailability]) -> list[CountryAvailability]:
        value = list(availability)
        # a slower lookup for an earlier selection must not replace the current one
        if self._selected_item_id == item_id:
            self.selected_availability = value
        return value

    def _remember_availability(self, item_id: str, availability: Iterable[CountryAvailability]) -> None:
        value = self._availability.put(item_id, availability)
        self.search_results = [
            r.with_availability(value) if r.item_id == item_id else r
            for r in self.search_results
        ]

    def save_to_watchlist(self, item: CatalogItem) -> bool:
        if self.is_saved(item):
            return False
        item_id = item.item_id
        self._states[item_id] = WatchState.PENDING

        availability: Iterable[CountryAvailability] = (
            item.availability
            or self._availability.get(item_id)
            or (self.selected_availability if self._selected_item_id == item_id else ())
        )
        try:
            self.store.save(item, availability)
        except PersistenceError as e:
            self.error_message = f"Could not save {item.title or item_id}."
            logger.error("watchlist_save_failed", extra={"item_id": item_id, "error": str(e)})

        self.fetch_saved_items()
        if self._states.get(item_id) is WatchState.PENDING:
            del self._states[item_id]
        return self.is_saved(item_id)

    def remove_from_watchlist(self, item: CatalogItem | str) -> None:
        item_id = _id(item)
        self._states[item_id] = WatchState.REMOVING
        try:
            self.store.delete_by_id(item_id)
        except PersistenceError as e:
            self.error_message = "Could not remove the title from your watchlist."
            logger.error("watchlist_remove_failed", extra={"item_id": item_id, "error": str(e)})
        self.fetch_saved_items()

    def remove_saved_item(self, saved: SavedItem) -> None:
        self._states[saved.item_id] = WatchState.REMOVING
        try:
            self.store.delete(saved)
        except PersistenceError as e:
            self.error_message = "Could not remove the title from your watchlist."
            logger.error("watchlist_remove_failed", extra={"item_id": saved.item_id, "error": str(e)})
        self.fetch_saved_items()

    def clear_watchlist(self) -> None:
        for item_id, state in self._states.items():
            if state is WatchState.SAVED:
                self._states[item_id] = WatchState.REMOVING
        try:
            self.store.delete_all()
        except PersistenceError as e:
            self.error_message = "Could not clear your watchlist."
            logger.error("watchlist_clear_failed", extra={"error": str(e)})
        self.fetch_saved_items()

    def fetch_saved_items(self) -> list[SavedItem]:
        self.saved_items = self.store.list_saved_items()
        saved_ids = {s.item_id for s in self.saved_items}

        # pending saves stay pending until save_to_watchlist finishes
        for item_id, state in list(self._states.items()):
            if item_id not in saved_ids and state is not WatchState.PENDING:
                del self._states[item_id]
        for saved in self.saved_items:
            self._states[saved.item_id] = WatchState.SAVED
            availability = saved.to_catalog_item().availability
            if availability:
                self._remember_availability(saved.item_id, availability)

        self._merge_cached_availability()
        return self.saved_items

    def _merge_cached_availability(self) -> None:
        # membership is answered by is_saved(); is_saved_item stays reserved for watchlist rows
        updated = []
        for item in self.search_results:
            if item.availability is None and item.item_id in self._availability:
                cached = self._availability.get(item.item_id)
                if cached:
                    item = item.with_availability(cached)
            updated.append(item)
        self.search_results = updated


def _id(item: CatalogItem | str) -> str:
    return item if isinstance(item, str) else item.item_id