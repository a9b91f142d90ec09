# fitquest/progression/quests.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Union

from fitquest.common.config import QUEST_TARGET
from fitquest.common.rules import ExerciseType


@dataclass(frozen=True)
class QuestRewards:
    exp: float = 1.0
    strength: float = 1.0
    endurance: float = 1.0


@dataclass(frozen=True)
class QuestProgress:
    """The part of a quest that is persisted per (user, date, quest)."""
    current: int = 0
    completed: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QuestProgress":
        current = data.get("current", data.get("current_progress", data.get("currentProgress", 0)))
        return cls(current=max(0, int(current or 0)), completed=bool(data.get("completed", False)))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Quest:
    id: str
    title: str
    description: str
    target: int = QUEST_TARGET
    current: int = 0
    completed: bool = False
    rewards: QuestRewards = field(default_factory=QuestRewards)

    @property
    def display_current(self) -> int:
        return min(self.current, self.target)

    @property
    def progress_ratio(self) -> float:
        return min(self.current / self.target, 1.0)

    @property
    def progress(self) -> QuestProgress:
        return QuestProgress(current=self.current, completed=self.completed)

    def with_progress(self, progress: QuestProgress) -> "Quest":
        return replace(self, current=progress.current, completed=progress.completed)


# id -> (exercise, title, description)
QUEST_CATALOG: Dict[str, tuple] = {
    "pushups": (ExerciseType.PUSHUP, "Push-up Master", "Complete 100 push-ups today"),
    "situps": (ExerciseType.SITUP, "Sit-up Champion", "Complete 100 sit-ups today"),
    "squats": (ExerciseType.SQUAT, "Squat Master", "Complete 100 squats today"),
    "planks": (ExerciseType.PLANK, "Plank Champion", "Hold plank for 100 seconds today"),
    "lunges": (ExerciseType.LUNGE, "Lunge Master", "Complete 100 lunges today"),
    "swordstrikes": (ExerciseType.SWORDSTRIKE, "Sword Strike Master", "Complete 100 sword strikes today"),
}

_QUEST_BY_EXERCISE = {ex: qid for qid, (ex, _, _) in QUEST_CATALOG.items()}

# used in completion messages
EXERCISE_NOUNS = {
    ExerciseType.PUSHUP: "push-ups",
    ExerciseType.SITUP: "sit-ups",
    ExerciseType.SQUAT: "squats",
    ExerciseType.PLANK: "seconds of plank",
    ExerciseType.LUNGE: "lunges",
    ExerciseType.SWORDSTRIKE: "sword strikes",
}


def quest_id_for(exercise: Union[ExerciseType, str]) -> str:
    return _QUEST_BY_EXERCISE[ExerciseType(exercise)]


def exercise_for(quest_id: str) -> Optional[ExerciseType]:
    entry = QUEST_CATALOG.get(quest_id)
    return entry[0] if entry else None


def catalog_quests() -> List[Quest]:
    return [Quest(id=qid, title=title, description=desc)
            for qid, (_, title, desc) in QUEST_CATALOG.items()]


def seed_daily_quests(existing: Optional[Mapping[str, Any]] = None) -> List[Quest]:
    """
    The fixed six-quest catalog with any saved progress overlaid by quest id.
    `existing` values may be QuestProgress or plain dicts; unknown ids are ignored.
    """
    existing = existing or {}
    quests = []
    for quest in catalog_quests():
        saved = existing.get(quest.id)
        if saved is not None:
            if not isinstance(saved, QuestProgress):
                saved = QuestProgress.from_dict(saved)
            quest = quest.with_progress(saved)
        quests.append(quest)
    return quests
