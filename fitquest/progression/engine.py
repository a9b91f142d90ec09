# fitquest/progression/engine.py
"""
Progression rules: rep gains, quest progress, one-time quest rewards.

Everything here is pure: inputs are never mutated, new Stats/Quest values
are returned. No I/O; saving is the caller's job (see progression.session).
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple, Union

from fitquest.common.config import ENDURANCE_PER_TEN_REPS, STRENGTH_PER_REP
from fitquest.common.rules import ExerciseType

from .quests import EXERCISE_NOUNS, Quest, QuestRewards, quest_id_for, seed_daily_quests
from .stats import Stats, recompute_level

__all__ = [
    "apply_rep_gain", "apply_quest_progress", "apply_reward", "recompute_level",
    "seed_daily_quests", "initial_stats", "finish_exercise", "ExerciseOutcome",
]


def strength_gain(count: int) -> float:
    return max(0, count) * STRENGTH_PER_REP


def endurance_gain(count: int) -> float:
    return math.floor(max(0, count) / 10) * ENDURANCE_PER_TEN_REPS


def apply_rep_gain(stats: Stats, count: int) -> Stats:
    """Raw reps train strength and endurance only; exp comes from quests."""
    if count <= 0:
        return stats
    return replace(
        stats,
        strength=stats.strength + strength_gain(count),
        endurance=stats.endurance + endurance_gain(count),
    )


def apply_quest_progress(quest: Quest, count: int) -> Tuple[Quest, Optional[QuestRewards]]:
    """
    Add reps to a quest. The reward bundle is returned only on the
    current < target -> current >= target edge; completed quests are frozen.
    """
    if quest.completed or count <= 0:
        return quest, None
    new_current = quest.current + count
    if new_current >= quest.target:
        return replace(quest, current=new_current, completed=True), quest.rewards
    return replace(quest, current=new_current), None


def apply_reward(stats: Stats, rewards: Optional[QuestRewards]) -> Stats:
    if rewards is None:
        return stats
    return replace(
        stats,
        exp=stats.exp + rewards.exp,
        strength=stats.strength + rewards.strength,
        endurance=stats.endurance + rewards.endurance,
    )


def initial_stats(total_reps: int) -> Stats:
    """One-time stats from the initial assessment; bypasses quests."""
    return Stats(strength=strength_gain(total_reps), endurance=endurance_gain(total_reps))


@dataclass(frozen=True)
class ExerciseOutcome:
    exercise: ExerciseType
    count: int
    strength_gain: float = 0.0
    endurance_gain: float = 0.0
    quest_id: Optional[str] = None
    quest_completed: bool = False
    reward: Optional[QuestRewards] = None

    def summary(self) -> str:
        if self.count <= 0:
            return ""
        noun = EXERCISE_NOUNS[self.exercise]
        gains = [f"+{self.strength_gain:.1f} Strength"]
        if self.endurance_gain > 0:
            gains.append(f"+{self.endurance_gain:.1f} Endurance")
        message = f"Great job! You completed {self.count} {noun}!\n" + ", ".join(gains)
        if self.quest_completed and self.reward is not None:
            r = self.reward
            message += f"\n\nQuest Completed! +{r.exp:g} EXP, +{r.strength:g} STR, +{r.endurance:g} END"
        return message


def finish_exercise(stats: Stats, quests: Sequence[Quest], exercise: Union[ExerciseType, str],
                    count: int) -> Tuple[Stats, List[Quest], ExerciseOutcome]:
    """Apply one finished session: rep gain, quest progress, then the reward (at most once)."""
    exercise = ExerciseType(exercise)
    quests = list(quests)
    if count <= 0:
        return stats, quests, ExerciseOutcome(exercise=exercise, count=0)

    new_stats = apply_rep_gain(stats, count)
    qid = quest_id_for(exercise)
    reward = None
    for i, quest in enumerate(quests):
        if quest.id == qid:
            quests[i], reward = apply_quest_progress(quest, count)
            break
    new_stats = apply_reward(new_stats, reward)

    outcome = ExerciseOutcome(
        exercise=exercise,
        count=count,
        strength_gain=strength_gain(count),
        endurance_gain=endurance_gain(count),
        quest_id=qid,
        quest_completed=reward is not None,
        reward=reward,
    )
    return new_stats, quests, outcome
