# fitquest/common/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parents[2]

# Keypoint gating
CONFIDENCE_THRESHOLD = 0.5
SYMMETRY_TOLERANCE_DEG = 30.0
PLUMB_LENGTH = 100.0

# Progression
STRENGTH_PER_REP = 0.1
ENDURANCE_PER_TEN_REPS = 0.1
EXP_PER_LEVEL_STEP = 100
QUEST_TARGET = 100

# Initial assessment (seconds per exercise)
ASSESSMENT_MIN_S = 180
ASSESSMENT_MAX_S = 300
ASSESSMENT_DEFAULT_S = 300

# Persistence
API_URL = os.getenv("FITQUEST_API_URL", "http://localhost:5000/api")
API_TIMEOUT_S = float(os.getenv("FITQUEST_API_TIMEOUT", "5.0"))
DATA_DIR = Path(os.getenv("FITQUEST_DATA_DIR", str(BASE_DIR / "outputs")))

# Video
FPS_TARGET = 15


@dataclass
class RuntimeSettings:
    """Settings object read by the workers through getattr()."""
    target_fps: int = 30
    flip_camera: bool = True
    confidence: float = CONFIDENCE_THRESHOLD
    model_complexity: int = 1
