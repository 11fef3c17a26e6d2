"""Watchlist persistence.

All SQL for saved titles lives here; the coordinator talks to a
``WatchlistStore`` it was handed instead of touching sessions directly.
"""
from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from .errors import PersistenceError
from .metrics import WATCHLIST_MUTATIONS
from .models import SavedAvailability, SavedItem
from .types import CatalogItem, CountryAvailability

logger = logging.getLogger(__name__)


class WatchlistStore:
    """CRUD over saved titles and their per-country availability."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def list_saved_items(self) -> list[SavedItem]:
        """Every saved title, oldest first, with availability already loaded."""
        try:
            with Session(self.engine) as s:
                stmt = (
                    select(SavedItem)
                    .options(selectinload(SavedItem.availability))  # type: ignore[arg-type]
                    .order_by(SavedItem.id)
                )
                return list(s.exec(stmt).all())
        except SQLAlchemyError as e:
            logger.error("watchlist_fetch_failed", extra={"error": str(e)})
            return []

    def exists(self, item_id: str) -> bool:
        with Session(self.engine) as s:
            return self._find(s, item_id) is not None

    def save(self, item: CatalogItem, availability: Iterable[CountryAvailability]) -> bool:
        """Insert *item* with its availability rows.

        Returns False without writing when the identifier is already saved.
        Raises PersistenceError if the commit fails.
        """
        if self.exists(item.item_id):
            logger.debug("watchlist_save_skipped", extra={"item_id": item.item_id})
            return False
        records = list(availability)
        with Session(self.engine) as s:
            saved = SavedItem(
                item_id=item.item_id,
                title=item.title,
                synopsis=item.synopsis,
                img=item.img,
            )
            for a in records:
                SavedAvailability(
                    country_code=a.country_code,
                    country=a.country,
                    audio=a.audio,
                    subtitle=a.subtitle,
                    saved_item=saved,
                )
            s.add(saved)
            self._commit_if_dirty(s, "save")
        WATCHLIST_MUTATIONS.labels(action="save").inc()
        logger.info("watchlist_saved", extra={"item_id": item.item_id, "title": item.title, "countries": len(records)})
        return True

    def delete(self, item: SavedItem) -> bool:
        with Session(self.engine) as s:
            row = s.get(SavedItem, item.id) if item.id is not None else None
            if row is None:
                return False
            return self._delete_row(s, row)

    def delete_by_id(self, item_id: str) -> bool:
        with Session(self.engine) as s:
            row = self._find(s, item_id)
            if row is None:
                return False
            return self._delete_row(s, row)

    def delete_all(self) -> int:
        with Session(self.engine) as s:
            rows = s.exec(select(SavedItem)).all()
            for row in rows:
                s.delete(row)
            self._commit_if_dirty(s, "clear")
        if rows:
            WATCHLIST_MUTATIONS.labels(action="clear").inc()
        logger.info("watchlist_cleared", extra={"removed": len(rows)})
        return len(rows)

    @staticmethod
    def _find(s: Session, item_id: str) -> SavedItem | None:
        return s.exec(select(SavedItem).where(SavedItem.item_id == item_id).limit(1)).first()

    def _delete_row(self, s: Session, row: SavedItem) -> bool:
        item_id = row.item_id
        s.delete(row)
        self._commit_if_dirty(s, "delete")
        WATCHLIST_MUTATIONS.labels(action="delete").inc()
        logger.info("watchlist_deleted", extra={"item_id": item_id})
        return True

    @staticmethod
    def _commit_if_dirty(s: Session, action: str) -> bool:
        if not (s.new or s.dirty or s.deleted):
            return False
        try:
            s.commit()
        except SQLAlchemyError as e:
            s.rollback()
            logger.error("watchlist_commit_failed", extra={"action": action, "error": str(e)})
            raise PersistenceError(f"{action} failed: {e}") from e
        return True
