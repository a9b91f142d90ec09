# fitquest/progression/session.py
from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, List, Optional, Union

from fitquest.common.rules import ExerciseType
from fitquest.persistence.gateway import PersistenceError, PersistenceGateway
from fitquest.persistence.writer import BackgroundWriter

from . import engine
from .engine import ExerciseOutcome
from .quests import Quest, seed_daily_quests
from .stats import Stats

logger = logging.getLogger(__name__)


class CharacterSession:
    """
    Owns one user's Stats and the day's Quests.

    In-memory state is authoritative for the whole session. Saves go through
    the BackgroundWriter when one is given (fire-and-forget); without a writer
    they run inline but failures are still only logged.
    """
    def __init__(self, user_id, gateway: Optional[PersistenceGateway] = None,
                 writer: Optional[BackgroundWriter] = None, today: Optional[dt.date] = None):
        self.user_id = user_id
        self.gateway = gateway
        self.writer = writer
        self.today = today or dt.date.today()
        self.stats = Stats()
        self.quests: List[Quest] = seed_daily_quests()
        self.warnings: List[str] = []
        self._needs_assessment = False

    # ---------- loading ----------
    def load(self) -> "CharacterSession":
        stats, loaded = None, True
        if self.gateway is not None:
            try:
                stats = self.gateway.load_stats(self.user_id)
            except PersistenceError as e:
                self._warn("load stats", e)
                loaded = False
        self.stats = stats or Stats()
        # a failed read is not a new user
        self._needs_assessment = loaded and _untrained(self.stats)

        if self._needs_assessment:
            # quests start after the initial assessment
            self.quests = seed_daily_quests()
            return self
        self._load_quests()
        return self

    def _load_quests(self) -> None:
        existing = {}
        if self.gateway is not None:
            existing = self._read(lambda: self.gateway.load_quests(self.user_id, self.today),
                                  "load quests") or {}
        self.quests = seed_daily_quests(existing)

    def ensure_today(self, today: Optional[dt.date] = None) -> bool:
        """Re-seed the quest set when the calendar day changed. Returns True on rollover."""
        today = today or dt.date.today()
        if today == self.today:
            return False
        logger.info("day rolled over %s -> %s, re-seeding quests", self.today, today)
        self.today = today
        self.quests = seed_daily_quests()
        return True

    @property
    def needs_assessment(self) -> bool:
        return self._needs_assessment

    def quest(self, quest_id: str) -> Optional[Quest]:
        for q in self.quests:
            if q.id == quest_id:
                return q
        return None

    # ---------- progression ----------
    def finish_exercise(self, exercise: Union[ExerciseType, str], count: int) -> ExerciseOutcome:
        self.stats, self.quests, outcome = engine.finish_exercise(self.stats, self.quests, exercise, count)
        if outcome.count > 0:
            self._save_stats()
            quest = self.quest(outcome.quest_id) if outcome.quest_id else None
            if quest is not None:
                logger.info("quest %s: %d/%d (%.0f%%)", quest.id, quest.display_current,
                            quest.target, 100 * quest.progress_ratio)
                self._save_quest(quest)
        return outcome

    def complete_assessment(self, total_reps: int) -> Stats:
        self.stats = engine.initial_stats(total_reps)
        self._needs_assessment = False
        self._save_stats()
        self._load_quests()
        return self.stats

    # ---------- persistence ----------
    def _read(self, fn: Callable, what: str):
        try:
            return fn()
        except PersistenceError as e:
            self._warn(what, e)
            return None

    def _save_stats(self) -> None:
        if self.gateway is not None:
            self._dispatch(self.gateway.save_stats, self.user_id, self.stats, label="save stats")

    def _save_quest(self, quest: Quest) -> None:
        if self.gateway is not None:
            self._dispatch(self.gateway.save_quest_progress, self.user_id, quest.id,
                           quest.progress, self.today, label=f"save quest {quest.id}")

    def _dispatch(self, fn: Callable, *args, label: str) -> None:
        if self.writer is not None:
            self.writer.submit(fn, *args, label=label)
            return
        try:
            fn(*args)
        except PersistenceError as e:
            self._warn(label, e)

    def _warn(self, what: str, error: Exception) -> None:
        message = f"Failed to {what}: {error}"
        logger.warning(message)
        self.warnings.append(message)


def _untrained(stats: Stats) -> bool:
    return stats.strength == 0 and stats.endurance == 0 and stats.exp == 0
