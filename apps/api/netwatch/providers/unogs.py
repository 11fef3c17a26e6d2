from __future__ import annotations

import html
import logging
import uuid
from typing import Any

import requests

from ..errors import (
    CatalogDecodeError,
    CatalogNetworkError,
    EmptyResultsError,
    InvalidQueryError,
    MissingCredentialsError,
)
from ..metrics import CATALOG_REQUESTS
from ..settings import Settings
from ..types import CatalogItem, CountryAvailability
from ..usage import UsageCounter

logger = logging.getLogger(__name__)


class UnogsClient:
    """Client for the uNoGS title search and country availability endpoints.

    Every request that leaves the process is recorded on the usage counter.
    Nothing is retried.
    """

    name = "unogs"

    def __init__(self, settings: Settings, usage: UsageCounter, session: requests.Session | None = None):
        self.settings = settings
        self.usage = usage
        self.http = session or requests

    @property
    def calls_used(self) -> int:
        return self.usage.used

    @property
    def calls_remaining(self) -> int:
        return self.usage.remaining

    def _headers(self) -> dict[str, str]:
        return {
            "x-rapidapi-key": self.settings.api_key,
            "x-rapidapi-host": self.settings.api_host,
        }

    def _get(self, path: str, params: dict[str, str]) -> requests.Response:
        return self.http.get(
            f"{self.settings.catalog_base_url.rstrip('/')}{path}",
            params=params,
            headers=self._headers(),
            timeout=self.settings.request_timeout_s,
        )

    def search(self, query: str) -> list[CatalogItem]:
        """Search titles matching *query*, keeping the first few rows.

        Raises a SearchError subclass on failure. A blank query returns an
        empty list without touching the network.
        """
        title = query.strip()
        if not title:
            return []
        try:
            title.encode("utf-8")
        except UnicodeEncodeError:
            raise InvalidQueryError(title)
        if not self.settings.has_credentials():
            CATALOG_REQUESTS.labels(endpoint="search", outcome="missing_credentials").inc()
            raise MissingCredentialsError()

        self.usage.record_call()
        try:
            r = self._get("/search/titles", {"title": title})
        except requests.RequestException as e:
            CATALOG_REQUESTS.labels(endpoint="search", outcome="network_error").inc()
            logger.warning("catalog_search_failed", extra={"query": title, "error": str(e)})
            raise CatalogNetworkError(str(e) or e.__class__.__name__) from e
        if not 200 <= r.status_code <= 299:
            CATALOG_REQUESTS.labels(endpoint="search", outcome="http_error").inc()
            logger.warning("catalog_search_failed", extra={"query": title, "status": r.status_code})
            raise CatalogNetworkError(f"HTTP {r.status_code}")
        try:
            body = r.json()
        except ValueError as e:
            CATALOG_REQUESTS.labels(endpoint="search", outcome="decode_error").inc()
            raise CatalogDecodeError(str(e)) from e

        results = body.get("results") if isinstance(body, dict) else None
        if not isinstance(results, list) or not results:
            CATALOG_REQUESTS.labels(endpoint="search", outcome="empty").inc()
            raise EmptyResultsError()

        rows = [row for row in results if isinstance(row, dict)][: self.settings.search_result_limit]
        if not rows:
            CATALOG_REQUESTS.labels(endpoint="search", outcome="empty").inc()
            raise EmptyResultsError()
        items = [self._to_item(row) for row in rows]
        CATALOG_REQUESTS.labels(endpoint="search", outcome="ok").inc()
        logger.info("catalog_search", extra={"query": title, "returned": len(results), "kept": len(items)})
        return items

    def fetch_availability(self, item_id: str, count_towards_usage: bool = True) -> list[CountryAvailability]:
        """Country availability for *item_id*; an empty list on any failure."""
        if not self.settings.has_credentials():
            CATALOG_REQUESTS.labels(endpoint="availability", outcome="missing_credentials").inc()
            logger.warning("catalog_availability_skipped", extra={"item_id": item_id, "reason": "missing credentials"})
            return []

        if count_towards_usage:
            self.usage.record_call()
        try:
            r = self._get("/title/countries", {"netflix_id": item_id})
        except requests.RequestException as e:
            CATALOG_REQUESTS.labels(endpoint="availability", outcome="network_error").inc()
            logger.warning("catalog_availability_failed", extra={"item_id": item_id, "error": str(e)})
            return []
        if not 200 <= r.status_code <= 299:
            CATALOG_REQUESTS.labels(endpoint="availability", outcome="http_error").inc()
            logger.warning("catalog_availability_failed", extra={"item_id": item_id, "status": r.status_code})
            return []
        try:
            body = r.json()
        except ValueError as e:
            CATALOG_REQUESTS.labels(endpoint="availability", outcome="decode_error").inc()
            logger.warning("catalog_availability_failed", extra={"item_id": item_id, "error": str(e)})
            return []

        results = body.get("results") if isinstance(body, dict) else None
        if not isinstance(results, list):
            CATALOG_REQUESTS.labels(endpoint="availability", outcome="empty").inc()
            return []
        CATALOG_REQUESTS.labels(endpoint="availability", outcome="ok").inc()
        return [CountryAvailability.from_raw(row) for row in results if isinstance(row, dict)]

    @staticmethod
    def _to_item(row: dict[str, Any]) -> CatalogItem:
        return CatalogItem(
            item_id=_item_id(row),
            title=row.get("title") if isinstance(row.get("title"), str) else "",
            img=row.get("img") if isinstance(row.get("img"), str) else "",
            synopsis=html.unescape(row.get("synopsis") if isinstance(row.get("synopsis"), str) else ""),
        )


def _item_id(row: dict[str, Any]) -> str:
    nid = row.get("netflix_id")
    if isinstance(nid, str):
        return nid
    # bool is an int subclass; a flag is not an identifier
    if isinstance(nid, int) and not isinstance(nid, bool):
        return str(nid)
    fallback = row.get("id")
    if isinstance(fallback, str) and fallback:
        return fallback
    return str(uuid.uuid4())
