# fitquest/common/rules.py
"""
Static per-exercise descriptors consumed by the generic RepStateMachine.

One ExerciseRule per supported exercise: which joints must be visible,
which 3-point angles to track, and the asymmetric enter-down / enter-up
thresholds. The gap between the two thresholds is the hysteresis band.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .config import CONFIDENCE_THRESHOLD, SYMMETRY_TOLERANCE_DEG
from .geometry import angle_at, plumb_below
from .keypoints import KeypointFrame

# Pseudo-joint: a point straight below the vertex, for thigh-vs-vertical angles
PLUMB = "__plumb__"


class ExerciseType(str, Enum):
    PUSHUP = "pushup"
    SITUP = "situp"
    SQUAT = "squat"
    PLANK = "plank"
    LUNGE = "lunge"
    SWORDSTRIKE = "swordstrike"


class RuleMode(str, Enum):
    CYCLE = "cycle"        # down/up angle thresholds, rep on recovery
    HOLD = "hold"          # plank: count entries into a straightness band
    POSITION = "position"  # sword strike: wrist height vs shoulder


@dataclass(frozen=True)
class AngleSpec:
    a: str
    b: str
    c: str

    def joints(self) -> Tuple[str, ...]:
        return tuple(j for j in (self.a, self.b, self.c) if j != PLUMB)

    def measure(self, frame: KeypointFrame) -> float:
        b = frame.point(self.b)
        c = plumb_below(b) if self.c == PLUMB else frame.point(self.c)
        return angle_at(frame.point(self.a), b, c)


@dataclass(frozen=True)
class FeedbackBand:
    """Advisory message shown while the tracked angle is strictly inside (low, high)."""
    low: float
    high: float
    message: str

    def matches(self, angle: float) -> bool:
        return self.low < angle < self.high


@dataclass(frozen=True)
class ExerciseRule:
    exercise: ExerciseType
    label: str
    required: Tuple[str, ...]
    angles: Tuple[AngleSpec, ...] = ()
    mode: RuleMode = RuleMode.CYCLE
    down_threshold: float = 0.0
    up_threshold: float = 180.0
    confidence_threshold: float = CONFIDENCE_THRESHOLD
    symmetry_tolerance: float = SYMMETRY_TOLERANCE_DEG
    # plank
    hold_band: Tuple[float, float] = (160.0, 200.0)
    # sword strike: (moving, reference) joints and pixel margins
    vertical_pair: Tuple[str, str] = ("right_wrist", "right_shoulder")
    raise_margin: float = 50.0
    strike_margin: float = 30.0
    ready_angle: float = 140.0
    # copy
    reposition_hint: str = "Position yourself fully in frame"
    down_status: str = "Down position"
    up_status: str = "Get into position"
    feedback_bands: Tuple[FeedbackBand, ...] = field(default_factory=tuple)
    down_feedback: str = ""
    rep_feedback: str = ""
    imbalance_feedback: str = "Keep both sides balanced"

    def __post_init__(self):
        if self.mode == RuleMode.CYCLE:
            if not self.angles:
                raise ValueError(f"{self.exercise.value}: cycle rules need at least one angle")
            if self.down_threshold >= self.up_threshold:
                raise ValueError(f"{self.exercise.value}: down threshold must sit below up threshold")
        missing = {j for spec in self.angles for j in spec.joints()} - set(self.required)
        if missing:
            raise ValueError(f"{self.exercise.value}: angle joints not in required set: {sorted(missing)}")

    @property
    def symmetric(self) -> bool:
        return len(self.angles) == 2

    def advisory(self, angle: float) -> str:
        for band in self.feedback_bands:
            if band.matches(angle):
                return band.message
        return ""


_LEFT_ARM = AngleSpec("left_shoulder", "left_elbow", "left_wrist")
_RIGHT_ARM = AngleSpec("right_shoulder", "right_elbow", "right_wrist")
_LEFT_TORSO = AngleSpec("left_shoulder", "left_hip", "left_knee")


RULES: Dict[ExerciseType, ExerciseRule] = {
    ExerciseType.PUSHUP: ExerciseRule(
        exercise=ExerciseType.PUSHUP,
        label="Push-up",
        required=("left_shoulder", "left_elbow", "left_wrist",
                  "right_shoulder", "right_elbow", "right_wrist"),
        angles=(_LEFT_ARM, _RIGHT_ARM),
        down_threshold=100.0,
        up_threshold=160.0,
        reposition_hint="Position yourself fully in frame",
        feedback_bands=(FeedbackBand(100.0, 160.0, "Good form!"),),
        imbalance_feedback="Keep arms balanced",
    ),
    ExerciseType.SITUP: ExerciseRule(
        exercise=ExerciseType.SITUP,
        label="Sit-up",
        required=("left_shoulder", "left_hip", "left_knee"),
        angles=(_LEFT_TORSO,),
        down_threshold=50.0,
        up_threshold=80.0,
        reposition_hint="Make sure upper body is visible",
        feedback_bands=(FeedbackBand(50.0, 80.0, "Keep going!"),),
        rep_feedback="Great rep!",
    ),
    ExerciseType.SQUAT: ExerciseRule(
        exercise=ExerciseType.SQUAT,
        label="Squat",
        required=("left_hip", "left_knee", "left_ankle",
                  "right_hip", "right_knee", "right_ankle"),
        angles=(AngleSpec("left_hip", "left_knee", "left_ankle"),
                AngleSpec("right_hip", "right_knee", "right_ankle")),
        down_threshold=110.0,
        up_threshold=160.0,
        reposition_hint="Stand facing the camera",
        down_status="Squat down",
        feedback_bands=(FeedbackBand(70.0, 110.0, "Good depth!"),
                        FeedbackBand(float("-inf"), 70.0, "Too low - protect your knees")),
        imbalance_feedback="Keep knees level",
    ),
    ExerciseType.PLANK: ExerciseRule(
        exercise=ExerciseType.PLANK,
        label="Plank",
        required=("left_shoulder", "left_hip", "left_knee"),
        angles=(_LEFT_TORSO,),
        mode=RuleMode.HOLD,
        hold_band=(160.0, 200.0),
        reposition_hint="Position yourself side-facing to camera",
        down_status="Holding plank...",
        up_status="Get into plank position",
    ),
    ExerciseType.LUNGE: ExerciseRule(
        exercise=ExerciseType.LUNGE,
        label="Lunge",
        required=("left_hip", "left_knee", "right_knee"),
        angles=(AngleSpec("left_hip", "left_knee", PLUMB),),
        down_threshold=100.0,
        up_threshold=160.0,
        reposition_hint="Stand facing the camera",
        down_status="Lunge down",
    ),
    ExerciseType.SWORDSTRIKE: ExerciseRule(
        exercise=ExerciseType.SWORDSTRIKE,
        label="Strike",
        required=("right_shoulder", "right_elbow", "right_wrist"),
        angles=(_RIGHT_ARM,),
        mode=RuleMode.POSITION,
        vertical_pair=("right_wrist", "right_shoulder"),
        raise_margin=50.0,
        strike_margin=30.0,
        ready_angle=140.0,
        reposition_hint="Stand side-facing to camera",
        down_status="Strike!",
        up_status="Raised - ready!",
        down_feedback="Good strike!",
    ),
}


def get_rule(exercise: Union[ExerciseType, str]) -> ExerciseRule:
    """Look up the rule for an exercise; unknown names raise ValueError."""
    try:
        key = ExerciseType(exercise)
    except ValueError:
        raise ValueError(f"Unknown exercise: {exercise!r}") from None
    return RULES[key]


def exercise_names() -> Tuple[str, ...]:
    return tuple(e.value for e in ExerciseType)


def parse_exercise(name: Optional[str]) -> ExerciseType:
    return get_rule((name or "").strip().lower()).exercise
