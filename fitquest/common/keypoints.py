# fitquest/common/keypoints.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .geometry import Point

# MoveNet / COCO joint names, the naming the pose source emits
JOINT_NAMES = [
    "nose",
    "left_eye", "right_eye",
    "left_ear", "right_ear",
    "left_shoulder", "right_shoulder",
    "left_elbow", "right_elbow",
    "left_wrist", "right_wrist",
    "left_hip", "right_hip",
    "left_knee", "right_knee",
    "left_ankle", "right_ankle",
]


@dataclass(frozen=True)
class Keypoint:
    name: str
    x: float
    y: float
    confidence: float = 1.0

    @property
    def point(self) -> Point:
        return (self.x, self.y)


@dataclass(frozen=True)
class KeypointFrame:
    """
    Snapshot of one pose-estimation cycle: joint name -> Keypoint.
    timestamp is in seconds and optional (only hold timing and the
    timed assessment look at it).
    """
    keypoints: Mapping[str, Keypoint] = field(default_factory=dict)
    timestamp: Optional[float] = None

    def get(self, name: str) -> Optional[Keypoint]:
        return self.keypoints.get(name)

    def visible(self, name: str, threshold: float) -> bool:
        kp = self.keypoints.get(name)
        return kp is not None and kp.confidence >= threshold

    def point(self, name: str) -> Point:
        return self.keypoints[name].point

    def __contains__(self, name: str) -> bool:
        return name in self.keypoints

    def __len__(self) -> int:
        return len(self.keypoints)

    # ---------- constructors ----------
    @classmethod
    def from_keypoints(cls, keypoints: Iterable[Any], timestamp: Optional[float] = None) -> "KeypointFrame":
        """
        Build from a MoveNet-style list: objects or dicts with name, x, y and
        score/confidence. Unnamed entries are skipped.
        """
        out: Dict[str, Keypoint] = {}
        for kp in keypoints:
            if isinstance(kp, Keypoint):
                out[kp.name] = kp
                continue
            get = kp.get if isinstance(kp, Mapping) else (lambda k, d=None: getattr(kp, k, d))
            name = get("name")
            if not name:
                continue
            conf = get("score")
            if conf is None:
                conf = get("confidence", 1.0)
            out[name] = Keypoint(name, float(get("x")), float(get("y")), float(conf))
        return cls(out, timestamp)

    @classmethod
    def from_mapping(cls, points: Mapping[str, Tuple[float, ...]], timestamp: Optional[float] = None) -> "KeypointFrame":
        """{name: (x, y)} or {name: (x, y, confidence)}."""
        out: Dict[str, Keypoint] = {}
        for name, p in points.items():
            conf = float(p[2]) if len(p) > 2 else 1.0
            out[name] = Keypoint(name, float(p[0]), float(p[1]), conf)
        return cls(out, timestamp)

    @classmethod
    def from_row(cls, row: Mapping[str, Any], timestamp_col: str = "t_s") -> "KeypointFrame":
        """Wide CSV row: <joint>_x, <joint>_y, <joint>_conf. NaN coordinates mean absent."""
        out: Dict[str, Keypoint] = {}
        for name in JOINT_NAMES:
            x = _finite(row.get(f"{name}_x"))
            y = _finite(row.get(f"{name}_y"))
            if x is None or y is None:
                continue
            conf = _finite(row.get(f"{name}_conf"))
            out[name] = Keypoint(name, x, y, 0.0 if conf is None else conf)
        return cls(out, _finite(row.get(timestamp_col)))

    def to_row(self) -> Dict[str, float]:
        row: Dict[str, float] = {}
        for name in JOINT_NAMES:
            kp = self.keypoints.get(name)
            row[f"{name}_x"] = kp.x if kp else math.nan
            row[f"{name}_y"] = kp.y if kp else math.nan
            row[f"{name}_conf"] = kp.confidence if kp else 0.0
        return row


def _finite(v: Any) -> Optional[float]:
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


KEYPOINT_COLUMNS = [f"{n}_{s}" for n in JOINT_NAMES for s in ("x", "y", "conf")]
