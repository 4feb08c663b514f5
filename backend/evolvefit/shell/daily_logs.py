"""Daily Log Store - Date-bucketed nutrition logs per user.

Storage layout per user:
    {prefix}db_logs_{user_id}: { "YYYY-MM-DD": DailyLog, ... }

A date with no stored log reads as a zeroed log; nothing is written until a
meal or day field is recorded. Every write refolds total_macros from meals.
"""

import logging
from datetime import datetime, tzinfo
from typing import Callable

from ..core.dates import local_date, local_date_key, parse_date_key, trailing_date_keys
from ..core.errors import NoActiveSession
from ..core.macros import refold, with_meal
from ..core.models import DailyLog, MealEntry, utc_now
from .directory import DirectoryStore
from .kv_store import KeyValueStore, StoreKeys, delete_value, read_map, write_map


logger = logging.getLogger(__name__)


def empty_log(date_key: str) -> DailyLog:
    """A zeroed log for a date."""
    return DailyLog(date=date_key)


class DailyLogStore:
    """Client for reading and appending to daily nutrition logs.

    Methods take an explicit user_id; when it is None the signed-in account
    is used. A session pointing at a deleted account counts as logged out.
    Reads without any user return zeroed logs, writes raise NoActiveSession.
    """

    def __init__(
        self,
        store: KeyValueStore,
        keys: StoreKeys,
        directory: DirectoryStore,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._keys = keys
        self._directory = directory
        self._tz = tz
        self._clock = clock

    def _resolve(self, user_id: str | None) -> str | None:
        if user_id is not None:
            return user_id
        account = self._directory.current_account()
        return account.id if account is not None else None

    def _require(self, user_id: str | None) -> str:
        resolved = self._resolve(user_id)
        if resolved is None:
            raise NoActiveSession()
        return resolved

    def _load(self, user_id: str) -> dict[str, DailyLog]:
        return read_map(self._store, self._keys.logs(user_id), DailyLog)

    def _save(self, user_id: str, logs: dict[str, DailyLog]) -> None:
        write_map(self._store, self._keys.logs(user_id), logs, DailyLog)

    def now(self) -> datetime:
        """Current instant from the store clock."""
        return self._clock()

    def today_key(self) -> str:
        """Date key of the current local day."""
        return local_date_key(self._clock(), self._tz)

    # ==================== Reads ====================

    def get_log(self, date_key: str, user_id: str | None = None) -> DailyLog:
        """Fetch the log for a date, or a zeroed one if nothing is stored.

        Raises:
            ValueError: If date_key is not a valid YYYY-MM-DD date
        """
        parse_date_key(date_key)
        resolved = self._resolve(user_id)
        if resolved is None:
            return empty_log(date_key)
        logger.debug("Fetching log for %s on %s", resolved[:8], date_key)
        return self._load(resolved).get(date_key) or empty_log(date_key)

    def get_recent_logs(self, days: int, user_id: str | None = None) -> list[DailyLog]:
        """Logs for the consecutive local days ending today, oldest first.

        Always returns exactly `days` logs; days without data are zeroed.

        Raises:
            ValueError: If days is not positive
        """
        if days < 1:
            raise ValueError("days must be at least 1")
        resolved = self._resolve(user_id)
        stored = self._load(resolved) if resolved is not None else {}
        today = local_date(self._clock(), self._tz)
        return [stored.get(key) or empty_log(key) for key in trailing_date_keys(today, days)]

    def all_logs(self, user_id: str) -> dict[str, DailyLog]:
        """Every stored log of a user, keyed by date."""
        return self._load(user_id)

    # ==================== Writes ====================

    def append_meal(self, meal: MealEntry, user_id: str | None = None) -> DailyLog:
        """Append a meal to the log of the day it was eaten.

        The date key comes from the meal's own timestamp, so backdated meals
        land on the right day.

        Returns:
            The updated DailyLog

        Raises:
            NoActiveSession: If no user is given and nobody is signed in
        """
        resolved = self._require(user_id)
        date_key = local_date_key(meal.timestamp, self._tz)

        logs = self._load(resolved)
        updated = with_meal(logs.get(date_key) or empty_log(date_key), meal)
        logs[date_key] = updated
        self._save(resolved, logs)

        logger.info("Logged meal for %s on %s: %s", resolved[:8], date_key, meal.name)
        return updated

    def _update_day(self, date_key: str, user_id: str | None, changes: dict) -> DailyLog:
        parse_date_key(date_key)
        resolved = self._require(user_id)
        logs = self._load(resolved)
        updated = refold((logs.get(date_key) or empty_log(date_key)).model_copy(update=changes))
        logs[date_key] = updated
        self._save(resolved, logs)
        return updated

    def set_water_intake(self, date_key: str, litres: float, user_id: str | None = None) -> DailyLog:
        """Record the water drunk on a day.

        Raises:
            ValueError: If litres is negative or date_key is invalid
            NoActiveSession: If no user is given and nobody is signed in
        """
        if litres < 0:
            raise ValueError("Water intake cannot be negative")
        return self._update_day(date_key, user_id, {"water_intake": litres})

    def mark_workout(self, date_key: str, completed: bool = True, user_id: str | None = None) -> DailyLog:
        """Record whether the day's workout was done."""
        return self._update_day(date_key, user_id, {"workout_completed": completed})

    def delete_all(self, user_id: str) -> None:
        """Drop every log of a user."""
        key = self._keys.logs(user_id)
        if self._store.get(key) is not None:
            delete_value(self._store, key)
            logger.info("Deleted logs for %s", user_id[:8])
