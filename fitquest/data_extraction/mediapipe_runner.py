# fitquest/data_extraction/mediapipe_runner.py
from __future__ import annotations

import time
from typing import Optional

import cv2
import mediapipe as mp
import numpy as np

from fitquest.common.keypoints import Keypoint, KeypointFrame

# BlazePose landmark index -> joint name used by the exercise rules
LANDMARK_JOINTS = {
    0: "nose",
    2: "left_eye", 5: "right_eye",
    7: "left_ear", 8: "right_ear",
    11: "left_shoulder", 12: "right_shoulder",
    13: "left_elbow", 14: "right_elbow",
    15: "left_wrist", 16: "right_wrist",
    23: "left_hip", 24: "right_hip",
    25: "left_knee", 26: "right_knee",
    27: "left_ankle", 28: "right_ankle",
}


def landmarks_to_frame(landmarks, width: int, height: int,
                       timestamp: Optional[float] = None) -> KeypointFrame:
    """Normalized landmarks -> pixel-space KeypointFrame, visibility as confidence."""
    kps = [
        Keypoint(name, landmarks[i].x * width, landmarks[i].y * height, landmarks[i].visibility)
        for i, name in LANDMARK_JOINTS.items()
    ]
    return KeypointFrame.from_keypoints(kps, timestamp)


class PoseRunner:
    """MediaPipe Pose on BGR frames. Pixel coordinates matter: the sword-strike margins are in px."""

    def __init__(self, static_image_mode: bool = False, model_complexity: int = 1,
                 min_detection_confidence: float = 0.5, min_tracking_confidence: float = 0.5):
        self._pose = mp.solutions.pose.Pose(
            static_image_mode=static_image_mode,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

    def process_bgr(self, frame_bgr: np.ndarray, timestamp: Optional[float] = None) -> Optional[KeypointFrame]:
        if self._pose is None:
            raise RuntimeError("PoseRunner is closed")
        result = self._pose.process(cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB))
        if result is None or result.pose_landmarks is None:
            return None
        height, width = frame_bgr.shape[:2]
        ts = time.monotonic() if timestamp is None else timestamp
        return landmarks_to_frame(result.pose_landmarks.landmark, width, height, ts)

    def close(self) -> None:
        if self._pose is not None:
            self._pose.close()
            self._pose = None

    def __enter__(self) -> "PoseRunner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
