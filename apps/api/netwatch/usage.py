from __future__ import annotations

import logging
import threading
from datetime import date, datetime, timezone
from typing import Callable

from sqlalchemy.engine import Engine
from sqlmodel import Session

from .metrics import API_CALLS_USED
from .models import Preference

logger = logging.getLogger(__name__)

COUNT_KEY = "unogs.api_call_count"
RESET_KEY = "unogs.last_reset_date"


class UsageCounter:
    """Per-day count of catalog API calls, kept in the preferences table.

    The count is advisory: nothing here refuses a call once the daily
    allowance is spent.
    """

    def __init__(self, engine: Engine, allowance: int = 50, today: Callable[[], date] = date.today):
        self.engine = engine
        self.allowance = allowance
        self._today = today
        # record_call runs on catalog worker threads; read-modify-write must not interleave
        self._lock = threading.Lock()

    @property
    def used(self) -> int:
        with self._lock, Session(self.engine) as s:
            self._reset_if_new_day(s)
            return self._count(s)

    @property
    def remaining(self) -> int:
        return max(self.allowance - self.used, 0)

    def record_call(self) -> int:
        with self._lock, Session(self.engine) as s:
            self._reset_if_new_day(s)
            n = self._count(s) + 1
            self._put(s, COUNT_KEY, str(n))
            s.commit()
        API_CALLS_USED.set(n)
        if n > self.allowance:
            logger.warning("catalog_allowance_exceeded", extra={"used": n, "allowance": self.allowance})
        return n

    def _reset_if_new_day(self, s: Session) -> None:
        today = self._today().isoformat()
        last = s.get(Preference, RESET_KEY)
        if last is not None and last.value == today:
            return
        self._put(s, COUNT_KEY, "0")
        self._put(s, RESET_KEY, today)
        s.commit()
        API_CALLS_USED.set(0)
        logger.info("catalog_usage_reset", extra={"day": today})

    @staticmethod
    def _count(s: Session) -> int:
        pref = s.get(Preference, COUNT_KEY)
        try:
            return int(pref.value) if pref else 0
        except ValueError:
            return 0

    @staticmethod
    def _put(s: Session, key: str, value: str) -> None:
        pref = s.get(Preference, key)
        if pref is None:
            pref = Preference(key=key, value=value)
        else:
            pref.value = value
            pref.updated_at = datetime.now(timezone.utc)
        s.add(pref)
