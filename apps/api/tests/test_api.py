import pytest
from fastapi.testclient import TestClient

from netwatch.main import create_app

from conftest import FakeResponse, US, search_rows


@pytest.fixture()
def api(coordinator):
    return TestClient(create_app(coordinator))


def test_readyz(api):
    r = api.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_healthz_reports_db_and_credentials(api):
    r = api.get("/healthz")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["checks"]["db"]["ok"] is True
    assert body["checks"]["catalog"]["credentials"] is True


def test_request_id_is_echoed(api):
    r = api.get("/readyz", headers={"X-Request-ID": "test-req-id"})
    assert r.headers["X-Request-ID"] == "test-req-id"


def test_search_endpoint(api, fake_http):
    fake_http.on("/search/titles", FakeResponse({"results": search_rows(7)}))
    r = api.get("/search", params={"title": " Inception "})
    assert r.status_code == 200
    body = r.json()
    assert body["query"] == "Inception"
    assert len(body["items"]) == 5
    assert body["items"][0]["item_id"] == "70131314"
    assert body["items"][0]["synopsis"] == "Dreams & heists"
    assert body["error"] is None
    assert body["usage"] == {"calls_used": 1, "calls_remaining": 49, "daily_allowance": 50}


def test_search_without_results_reports_message(api, fake_http):
    fake_http.on("/search/titles", FakeResponse({"results": []}))
    body = api.get("/search", params={"title": "qqq"}).json()
    assert body["items"] == []
    assert body["error"] == 'No results found for "qqq".'


def test_blank_search_endpoint(api, fake_http):
    body = api.get("/search", params={"title": "  "}).json()
    assert body["items"] == [] and body["error"] is None
    assert fake_http.calls == []


def test_availability_then_save_then_remove(api, fake_http):
    fake_http.on("/search/titles", FakeResponse({"results": search_rows(3)}))
    fake_http.on("/title/countries", FakeResponse({"results": [US]}))
    api.get("/search", params={"title": "Inception"})

    r = api.get("/titles/70131314/availability")
    assert r.status_code == 200
    assert r.json()["availability"] == [US]
    assert r.json()["usage"]["calls_used"] == 2

    r = api.post("/watchlist", json={"item_id": "70131314"})
    assert r.status_code == 200
    body = r.json()
    assert body["saved"] is True
    assert body["state"] == "saved"
    assert body["watchlist"]["items"][0]["availability"] == [US]

    # watchlist detail comes from the saved copy, no extra call
    r = api.get("/titles/70131314/availability", params={"source": "watchlist"})
    assert r.json()["availability"] == [US]
    assert r.json()["usage"]["calls_used"] == 2

    r = api.delete("/watchlist/70131314")
    assert r.json()["saved"] is False
    assert api.get("/watchlist").json()["items"] == []


def test_watchlist_source_never_calls_catalog(api, fake_http):
    r = api.get("/titles/unknown/availability", params={"source": "watchlist"})
    assert r.status_code == 200
    assert r.json()["availability"] == []
    assert fake_http.calls == []


def test_saved_title_found_by_search_fetches_availability(api, fake_http):
    api.post("/watchlist", json={"item_id": "42", "title": "Saved"})
    fake_http.on("/search/titles", FakeResponse({"results": [{"netflix_id": 42, "title": "Saved"}]}))
    fake_http.on("/title/countries", FakeResponse({"results": [US]}))

    (row,) = api.get("/search", params={"title": "Saved"}).json()["items"]
    assert row["saved"] is True and row["is_saved_item"] is False

    r = api.get("/titles/42/availability")
    assert r.json()["availability"] == [US]
    assert r.json()["usage"]["calls_used"] == 2


def test_save_unknown_title_needs_details(api):
    r = api.post("/watchlist", json={"item_id": "81234567"})
    assert r.status_code == 404


def test_save_with_full_payload_and_clear(api):
    r = api.post("/watchlist", json={
        "item_id": "81234567",
        "title": "The Crown",
        "availability": [US],
    })
    assert r.json()["saved"] is True
    assert [i["title"] for i in api.get("/watchlist").json()["items"]] == ["The Crown"]

    r = api.delete("/watchlist")
    assert r.status_code == 200
    assert r.json()["watchlist"]["items"] == []


def test_delete_missing_title_is_noop(api):
    r = api.delete("/watchlist/does-not-exist")
    assert r.status_code == 200
    assert r.json()["state"] == "unsaved"


def test_usage_endpoint(api):
    assert api.get("/usage").json() == {"calls_used": 0, "calls_remaining": 50, "daily_allowance": 50}


def test_metrics_exposes_catalog_counters(api, fake_http):
    fake_http.on("/search/titles", FakeResponse({"results": search_rows(1)}))
    api.get("/search", params={"title": "Inception"})
    r = api.get("/metrics")
    assert r.status_code == 200
    assert "catalog_requests_total" in r.text
