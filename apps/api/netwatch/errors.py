from __future__ import annotations


class SearchError(Exception):
    """Base class for failures surfaced by a catalog search."""

    message = "Search failed"

    def user_message(self, query: str) -> str:
        return self.message


class InvalidQueryError(SearchError):
    message = "Invalid URL"


class MissingCredentialsError(SearchError):
    message = "Missing API credentials. Check API_KEY and API_HOST."


class CatalogNetworkError(SearchError):
    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def user_message(self, query: str) -> str:
        return f"Network error: {self.detail}"


class EmptyResultsError(SearchError):
    def user_message(self, query: str) -> str:
        return f'No results found for "{query}".'


class CatalogDecodeError(SearchError):
    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def user_message(self, query: str) -> str:
        return f"Failed to process data: {self.detail}"


class PersistenceError(Exception):
    """A watchlist write could not be committed."""
