from datetime import date

import pytest
import requests

from netwatch.coordinator import WatchlistCoordinator
from netwatch.db import make_engine
from netwatch.providers.unogs import UnogsClient
from netwatch.settings import Settings
from netwatch.store import WatchlistStore
from netwatch.usage import UsageCounter


class FakeResponse:
    def __init__(self, payload=None, status_code=200, broken=False):
        self._payload = payload
        self.status_code = status_code
        self._broken = broken

    def json(self):
        if self._broken:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeCatalog:
    """Stands in for requests.get; routes by URL suffix."""

    def __init__(self):
        self.calls = []
        self.routes = {}

    def on(self, suffix, response):
        self.routes[suffix] = response

    def __call__(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        for suffix, resp in self.routes.items():
            if url.endswith(suffix):
                if callable(resp) and not isinstance(resp, FakeResponse):
                    resp = resp(params)
                if isinstance(resp, Exception):
                    raise resp
                return resp
        raise AssertionError(f"unexpected request to {url}")


class Clock:
    def __init__(self, day):
        self.day = day

    def __call__(self):
        return self.day


def search_rows(n):
    return [
        {"netflix_id": 70131314 + i, "title": f"Inception {i}", "img": f"https://img.example/{i}.jpg", "synopsis": "Dreams &amp; heists"}
        for i in range(n)
    ]


US = {"country_code": "US", "country": "United States", "audio": "English", "subtitle": "English"}
GB = {"country_code": "GB", "country": "United Kingdom", "audio": "English", "subtitle": "English,French"}


@pytest.fixture()
def cfg():
    return Settings(API_KEY="test-key", API_HOST="unogs.example", CATALOG_BASE_URL="https://unogs.example")


@pytest.fixture()
def engine():
    return make_engine("sqlite://")


@pytest.fixture()
def clock():
    return Clock(date(2025, 2, 17))


@pytest.fixture()
def usage(engine, clock):
    return UsageCounter(engine, allowance=50, today=clock)


@pytest.fixture()
def fake_http(monkeypatch):
    fake = FakeCatalog()
    monkeypatch.setattr(requests, "get", fake)
    return fake


@pytest.fixture()
def client(cfg, usage, fake_http):
    return UnogsClient(cfg, usage)


@pytest.fixture()
def store(engine):
    return WatchlistStore(engine)


@pytest.fixture()
def coordinator(client, store):
    return WatchlistCoordinator(client, store)
