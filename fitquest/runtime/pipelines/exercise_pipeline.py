# fitquest/runtime/pipelines/exercise_pipeline.py
from __future__ import annotations
from typing import Dict, Any, List, Tuple, Optional, Union

import numpy as np

from .base_pipeline import BasePipeline
from fitquest.common.fsm import RepStateMachine
from fitquest.common.overlays import draw_exercise_hud, draw_keypoints
from fitquest.common.rules import ExerciseType
from fitquest.common.workers import BaseModelWorker
from fitquest.runtime.services.pose_service import PoseService


class _ExerciseWorker(BaseModelWorker):
    """
    Worker لأي تمرين مسجّل:
      Pose(KeypointFrame) -> RepStateMachine.tick -> HUD
    """
    def __init__(self, source: Union[int, str], settings_obj, exercise: Union[ExerciseType, str],
                 pose_service: Optional[PoseService] = None):
        super().__init__(source, settings_obj)
        self.machine = RepStateMachine(exercise)
        self.pose = pose_service

    def load_models(self) -> None:
        if self.pose is None:
            self.pose = PoseService(
                model_complexity=getattr(self.settings, "model_complexity", 1),
                min_detection_confidence=getattr(self.settings, "confidence", 0.5),
                min_tracking_confidence=getattr(self.settings, "confidence", 0.5),
            )

    def release_models(self) -> None:
        if self.pose is not None:
            self.pose.close()

    def final_count(self) -> int:
        return self.machine.rep_count

    def infer_one(self, frame: np.ndarray) -> Dict[str, Any]:
        kp_frame = self.pose.keypoints(frame)
        res = self.machine.tick(kp_frame)

        events: List[Tuple[str, dict]] = []
        if res.rep_completed:
            events.append(("Rep", {
                "exercise": self.machine.exercise.value,
                "count": res.new_count,
                "angle": res.angle,
            }))
        elif res.transitioned:
            events.append(("Phase", {"exercise": self.machine.exercise.value, "phase": res.phase.value}))

        metrics = {
            "reps": res.new_count,
            "angle": res.angle,
            "phase": res.phase.value,
            "status": res.status,
            "feedback": res.feedback,
        }
        threshold = self.machine.rule.confidence_threshold
        overlay = draw_exercise_hud(draw_keypoints(frame, kp_frame, threshold), metrics)
        return {"overlay": overlay, "metrics": metrics, "events": events}


class ExercisePipeline(BasePipeline):
    """
    Pipeline عام: يبني الـ Worker للتمرين المطلوب ويعيده للواجهة.
    """
    def __init__(self, source: Union[int, str], settings=None, *, exercise: Union[ExerciseType, str]):
        super().__init__(source, settings)
        self.exercise = ExerciseType(exercise)

    def build_worker(self) -> BaseModelWorker:
        return _ExerciseWorker(self.source, self.settings, self.exercise)
