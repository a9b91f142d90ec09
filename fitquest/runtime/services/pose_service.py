# fitquest/runtime/services/pose_service.py
from __future__ import annotations
from typing import Optional

from fitquest.common.keypoints import KeypointFrame
from fitquest.data_extraction.mediapipe_runner import PoseRunner


class PoseService:
    """
    غلاف مباشر لـ PoseRunner.
    - يأخذ إطار BGR من OpenCV
    - يرجع KeypointFrame أو None
    """
    def __init__(self, **runner_kwargs):
        self._runner = PoseRunner(**runner_kwargs)

    def keypoints(self, frame_bgr, timestamp: Optional[float] = None) -> Optional[KeypointFrame]:
        return self._runner.process_bgr(frame_bgr, timestamp)

    def close(self):
        self._runner.close()
