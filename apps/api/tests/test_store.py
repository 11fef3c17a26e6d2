from datetime import timedelta

import pytest
from sqlmodel import Session, func, select

from netwatch.errors import PersistenceError
from netwatch.models import Preference, SavedAvailability, SavedItem
from netwatch.store import WatchlistStore
from netwatch.types import CatalogItem, CountryAvailability


def _item(item_id="70131314", title="Inception"):
    return CatalogItem(item_id=item_id, title=title, img="https://img.example/i.jpg", synopsis="Dreams")


AVAIL = [
    CountryAvailability("US", "United States", "English", "English"),
    CountryAvailability("GB", "United Kingdom", "English", "English,French"),
    CountryAvailability("JP", "Japan", "Japanese,English", "Japanese"),
]


def _availability_rows(engine):
    with Session(engine) as s:
        return s.exec(select(func.count()).select_from(SavedAvailability)).one()


def test_save_and_reload_keeps_every_availability_field(store):
    assert store.save(_item(), AVAIL) is True
    saved = store.list_saved_items()
    assert len(saved) == 1
    row = saved[0]
    assert (row.item_id, row.title, row.synopsis, row.img) == ("70131314", "Inception", "Dreams", "https://img.example/i.jpg")
    got = {(a.country_code, a.country, a.audio, a.subtitle) for a in row.availability}
    assert got == {(a.country_code, a.country, a.audio, a.subtitle) for a in AVAIL}


def test_to_catalog_item_marks_watchlist_origin(store):
    store.save(_item(), AVAIL[:1])
    item = store.list_saved_items()[0].to_catalog_item()
    assert item.is_saved_item
    assert item.availability == (AVAIL[0],)


def test_saved_item_without_availability_converts_to_none(store):
    store.save(_item(), [])
    assert store.list_saved_items()[0].to_catalog_item().availability is None


def test_save_is_idempotent_per_identifier(store, engine):
    assert store.save(_item(), AVAIL) is True
    assert store.save(_item(title="Inception again"), AVAIL[:1]) is False
    saved = store.list_saved_items()
    assert len(saved) == 1
    assert saved[0].title == "Inception"
    assert _availability_rows(engine) == 3


def test_exists(store):
    assert not store.exists("70131314")
    store.save(_item(), [])
    assert store.exists("70131314")


def test_list_is_in_insertion_order(store):
    for n in ("3", "1", "2"):
        store.save(_item(item_id=n, title=f"t{n}"), [])
    assert [s.item_id for s in store.list_saved_items()] == ["3", "1", "2"]


def test_delete_by_id_cascades_availability(store, engine):
    store.save(_item(), AVAIL)
    store.save(_item(item_id="2", title="Other"), AVAIL[:1])
    assert store.delete_by_id("70131314") is True
    assert [s.item_id for s in store.list_saved_items()] == ["2"]
    assert _availability_rows(engine) == 1


def test_delete_unknown_id_is_noop(store):
    store.save(_item(), [])
    assert store.delete_by_id("does-not-exist") is False
    assert len(store.list_saved_items()) == 1


def test_delete_by_object(store, engine):
    store.save(_item(), AVAIL)
    saved = store.list_saved_items()[0]
    assert store.delete(saved) is True
    assert store.list_saved_items() == []
    assert _availability_rows(engine) == 0
    # already gone
    assert store.delete(saved) is False


def test_delete_all(store, engine):
    for n in range(4):
        store.save(_item(item_id=str(n)), AVAIL[:2])
    assert store.delete_all() == 4
    assert store.list_saved_items() == []
    assert _availability_rows(engine) == 0
    assert store.delete_all() == 0


def test_commit_is_skipped_without_changes(engine):
    with Session(engine) as s:
        assert WatchlistStore._commit_if_dirty(s, "noop") is False


def test_commit_failure_is_reported(store, engine):
    SavedAvailability.__table__.drop(engine)
    with pytest.raises(PersistenceError):
        store.save(_item(), AVAIL)
    # the item row rolled back with the failed availability rows
    with Session(engine) as s:
        assert s.exec(select(SavedItem)).first() is None


def test_timestamps_default_to_aware_utc():
    assert SavedItem(item_id="x").created_at.utcoffset() == timedelta(0)
    assert Preference(key="k", value="v").updated_at.utcoffset() == timedelta(0)
