# fitquest/persistence/gateway.py
from __future__ import annotations

import datetime as dt
from typing import Dict, Optional, Union

from fitquest.progression.quests import QuestProgress
from fitquest.progression.stats import Stats

DateLike = Union[dt.date, str]


class PersistenceError(Exception):
    """A save/load against the backing store failed."""


def iso_date(day: Optional[DateLike] = None) -> str:
    if day is None:
        return dt.date.today().isoformat()
    if isinstance(day, dt.date):
        return day.isoformat()
    return str(day)


class PersistenceGateway:
    """
    Save/load interface for stats and daily quest progress.

    Upserts are idempotent and keyed by (user, date, quest). A missing record
    is a normal "new user" / "new day" case and never an error; real failures
    raise PersistenceError.
    """
    def save_stats(self, user_id, stats: Stats) -> None:
        raise NotImplementedError

    def load_stats(self, user_id) -> Optional[Stats]:
        """Return None when the user has no stats yet."""
        raise NotImplementedError

    def save_quest_progress(self, user_id, quest_id: str, progress: QuestProgress,
                            day: Optional[DateLike] = None) -> None:
        raise NotImplementedError

    def load_quests(self, user_id, day: Optional[DateLike] = None) -> Dict[str, QuestProgress]:
        raise NotImplementedError
