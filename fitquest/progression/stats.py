# fitquest/progression/stats.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Tuple

from fitquest.common.config import EXP_PER_LEVEL_STEP


def recompute_level(exp: float) -> int:
    """
    Level from cumulative exp: tier n needs n*100 more exp than tier n-1.
    0 -> 1, 100 -> 2, 299 -> 2, 300 -> 3.
    """
    level = 1
    spent = 0.0
    while spent + level * EXP_PER_LEVEL_STEP <= exp:
        spent += level * EXP_PER_LEVEL_STEP
        level += 1
    return level


def exp_for_level(level: int) -> int:
    """Cumulative exp at which `level` starts."""
    return sum(i * EXP_PER_LEVEL_STEP for i in range(1, max(1, int(level))))


def exp_to_next_level(level: int) -> int:
    return max(1, int(level)) * EXP_PER_LEVEL_STEP


@dataclass(frozen=True)
class Stats:
    """Character stats. `level` is derived from exp on every read and cannot be set."""
    strength: float = 0.0
    intelligence: float = 0.0
    endurance: float = 0.0
    exp: float = 0.0

    def __post_init__(self):
        for name in ("strength", "intelligence", "endurance", "exp"):
            value = float(getattr(self, name) or 0.0)
            object.__setattr__(self, name, max(0.0, value))

    @property
    def level(self) -> int:
        return recompute_level(self.exp)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["level"] = self.level
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Stats":
        # stored level is ignored, it is always re-derived from exp
        return cls(
            strength=float(data.get("strength") or 0.0),
            intelligence=float(data.get("intelligence") or 0.0),
            endurance=float(data.get("endurance") or 0.0),
            exp=float(data.get("exp") or 0.0),
        )


def level_progress(stats: Stats) -> Tuple[float, int]:
    """(exp earned inside the current level, exp the level needs)."""
    level = stats.level
    return stats.exp - exp_for_level(level), exp_to_next_level(level)
