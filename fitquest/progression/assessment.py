# fitquest/progression/assessment.py
from __future__ import annotations

from typing import Dict, Iterable, Optional, Union

from fitquest.common.config import ASSESSMENT_DEFAULT_S, ASSESSMENT_MAX_S, ASSESSMENT_MIN_S
from fitquest.common.fsm import RepStateMachine, TickResult
from fitquest.common.keypoints import KeypointFrame
from fitquest.common.rules import ExerciseType

from .engine import initial_stats
from .stats import Stats


class FitnessAssessment:
    """
    Timed initial trial: one RepStateMachine per exercise, back to back.
    The sum of all reps seeds the starting stats (quests are not touched).

    Time is taken from frame timestamps: the first timestamped frame starts the
    clock and the first frame at or past `duration_s` ends the exercise.
    """
    def __init__(self, exercises: Iterable[Union[ExerciseType, str]] = (ExerciseType.PUSHUP, ExerciseType.SITUP),
                 duration_s: float = ASSESSMENT_DEFAULT_S):
        if not ASSESSMENT_MIN_S <= duration_s <= ASSESSMENT_MAX_S:
            raise ValueError(f"duration_s must be within {ASSESSMENT_MIN_S}-{ASSESSMENT_MAX_S}s, got {duration_s}")
        self.exercises = tuple(ExerciseType(e) for e in exercises)
        if not self.exercises:
            raise ValueError("assessment needs at least one exercise")
        self.duration_s = float(duration_s)
        self.counts: Dict[ExerciseType, int] = {}
        self._index = -1
        self._machine: Optional[RepStateMachine] = None
        self._started_at: Optional[float] = None

    @property
    def current(self) -> Optional[ExerciseType]:
        return self._machine.exercise if self._machine else None

    @property
    def finished(self) -> bool:
        return self._machine is None and self._index >= len(self.exercises) - 1

    @property
    def total_reps(self) -> int:
        return sum(self.counts.values())

    def start_next(self) -> Optional[ExerciseType]:
        if self._machine is not None:
            self.finish_current()
        if self._index >= len(self.exercises) - 1:
            return None
        self._index += 1
        self._machine = RepStateMachine(self.exercises[self._index])
        self._started_at = None
        return self._machine.exercise

    def time_remaining(self, now: float) -> float:
        if self._started_at is None:
            return self.duration_s
        return max(0.0, self.duration_s - (now - self._started_at))

    def feed(self, frame: Optional[KeypointFrame]) -> Optional[TickResult]:
        """Tick the active exercise. Returns None when nothing is running or time ran out."""
        if self._machine is None:
            return None
        ts = frame.timestamp if frame is not None else None
        if ts is not None:
            if self._started_at is None:
                self._started_at = ts
            elif ts - self._started_at >= self.duration_s:
                self.finish_current()
                return None
        return self._machine.tick(frame)

    def finish_current(self) -> int:
        if self._machine is None:
            return 0
        ex, count = self._machine.exercise, self._machine.rep_count
        self.counts[ex] = self.counts.get(ex, 0) + count
        self._machine = None
        return count

    def skip_current(self) -> None:
        if self._machine is None:
            return
        self.counts.setdefault(self._machine.exercise, 0)
        self._machine = None

    def result(self) -> Stats:
        return initial_stats(self.total_reps)
