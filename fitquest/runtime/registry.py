# fitquest/runtime/registry.py
from __future__ import annotations
from functools import partial
from typing import Callable, Optional, Dict, Any

from fitquest.common.rules import ExerciseType
from .pipelines.exercise_pipeline import ExercisePipeline

# تسجيل التمارين -> Constructor للـ Pipeline
REGISTRY: Dict[str, Callable[..., Any]] = {
    ex.value: partial(ExercisePipeline, exercise=ex) for ex in ExerciseType
}


def get_pipeline_factory(exercise: str) -> Optional[Callable[..., Any]]:
    """
    يرجع Constructor للبايبلاين حسب اسم التمرين.
    """
    return REGISTRY.get((exercise or "").strip().lower())
