# fitquest/common/fsm.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .keypoints import KeypointFrame
from .rules import ExerciseRule, ExerciseType, RuleMode, get_rule

logger = logging.getLogger(__name__)


class ExercisePhase(str, Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class TickResult:
    transitioned: bool
    new_count: int
    feedback: str = ""
    phase: ExercisePhase = ExercisePhase.UP
    angle: Optional[float] = None
    status: str = ""
    rep_completed: bool = False


class RepStateMachine:
    """
    Generic rep counter driven by an ExerciseRule.

    States: up -> down -> up. A rep is counted once on the down->up edge.
    Frames missing a required joint (or below the confidence floor) are
    non-events: no phase change, only a reposition hint.
    """
    def __init__(self, exercise: Union[ExerciseType, str], rule: Optional[ExerciseRule] = None):
        self.rule = rule or get_rule(exercise)
        self.exercise = self.rule.exercise
        self.reset()

    def reset(self):
        self.phase = ExercisePhase.UP
        self.rep_count = 0
        self.hold_seconds = 0.0
        self.status = ""
        self._last_hold_ts: Optional[float] = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "exercise": self.exercise.value,
            "phase": self.phase.value,
            "rep_count": self.rep_count,
            "hold_seconds": self.hold_seconds,
        }

    # ---------- tick ----------
    def tick(self, frame: Optional[KeypointFrame]) -> TickResult:
        rule = self.rule
        if frame is None or not self._has_required(frame):
            logger.debug("%s: required joints missing or low confidence", self.exercise.value)
            self._last_hold_ts = None
            return self._result(False, rule.reposition_hint)

        if rule.mode == RuleMode.HOLD:
            return self._tick_hold(frame)
        if rule.mode == RuleMode.POSITION:
            return self._tick_position(frame)
        return self._tick_cycle(frame)

    def _has_required(self, frame: KeypointFrame) -> bool:
        th = self.rule.confidence_threshold
        return all(frame.visible(j, th) for j in self.rule.required)

    def _tracked_angle(self, frame: KeypointFrame) -> Tuple[float, str]:
        rule = self.rule
        values = [spec.measure(frame) for spec in rule.angles]
        angle = sum(values) / len(values)
        if rule.symmetric and abs(values[0] - values[1]) > rule.symmetry_tolerance:
            return angle, rule.imbalance_feedback
        return angle, rule.advisory(angle)

    def _tick_cycle(self, frame: KeypointFrame) -> TickResult:
        rule = self.rule
        angle, feedback = self._tracked_angle(frame)

        if self.phase == ExercisePhase.UP and angle < rule.down_threshold:
            self.phase = ExercisePhase.DOWN
            self.status = rule.down_status
            return self._result(True, rule.down_feedback or feedback, angle)

        if self.phase == ExercisePhase.DOWN and angle > rule.up_threshold:
            return self._count_rep(rule.rep_feedback or feedback, angle)

        return self._result(False, feedback, angle)

    def _tick_hold(self, frame: KeypointFrame) -> TickResult:
        rule = self.rule
        angle = rule.angles[0].measure(frame)
        low, high = rule.hold_band

        if low < angle < high:
            self.status = rule.down_status
            if self.phase == ExercisePhase.UP:
                self.phase = ExercisePhase.DOWN
                self.rep_count += 1
                self._last_hold_ts = frame.timestamp
                return self._result(True, rule.rep_feedback, angle, rep=True)
            self._accumulate_hold(frame.timestamp)
            return self._result(False, rule.rep_feedback, angle)

        self.status = rule.up_status
        self._last_hold_ts = None
        if self.phase == ExercisePhase.DOWN:
            self.phase = ExercisePhase.UP
            return self._result(True, "", angle)
        return self._result(False, "", angle)

    def _tick_position(self, frame: KeypointFrame) -> TickResult:
        rule = self.rule
        moving, reference = rule.vertical_pair
        y = frame.point(moving)[1]
        ref_y = frame.point(reference)[1]
        angle = rule.angles[0].measure(frame) if rule.angles else None

        raised = y < ref_y - rule.raise_margin
        struck = y > ref_y + rule.strike_margin
        feedback = ""
        if raised and angle is not None and angle > rule.ready_angle:
            feedback = "Ready to strike!"

        if raised and self.phase == ExercisePhase.DOWN:
            return self._count_rep(rule.rep_feedback or feedback, angle)

        if struck and self.phase == ExercisePhase.UP:
            self.phase = ExercisePhase.DOWN
            self.status = rule.down_status
            return self._result(True, rule.down_feedback or feedback, angle)

        return self._result(False, feedback, angle)

    # ---------- helpers ----------
    def _count_rep(self, feedback: str, angle: Optional[float]) -> TickResult:
        self.phase = ExercisePhase.UP
        self.rep_count += 1
        self.status = f"{self.rule.label} {self.rep_count}!"
        return self._result(True, feedback, angle, rep=True)

    def _accumulate_hold(self, ts: Optional[float]):
        if ts is None:
            self._last_hold_ts = None
            return
        if self._last_hold_ts is not None and ts > self._last_hold_ts:
            self.hold_seconds += ts - self._last_hold_ts
        self._last_hold_ts = ts

    def _result(self, transitioned: bool, feedback: str, angle: Optional[float] = None,
                rep: bool = False) -> TickResult:
        return TickResult(
            transitioned=transitioned,
            new_count=self.rep_count,
            feedback=feedback,
            phase=self.phase,
            angle=angle,
            status=self.status,
            rep_completed=rep,
        )
