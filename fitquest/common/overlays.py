# fitquest/common/overlays.py
from __future__ import annotations

from typing import Dict, Optional

import cv2
import numpy as np

from .keypoints import KeypointFrame


def draw_keypoints(frame: np.ndarray, kp_frame: Optional[KeypointFrame], threshold: float = 0.5) -> np.ndarray:
    """
    يرسم النقاط فوق الإطار: أخضر للثقة العالية، برتقالي للمتوسطة.
    النقاط تحت العتبة لا تُرسم.
    """
    out = frame.copy()
    if kp_frame is None:
        return out
    for kp in kp_frame.keypoints.values():
        if kp.confidence <= threshold:
            continue
        color = (0, 255, 0) if kp.confidence > 0.7 else (0, 165, 255)
        cv2.circle(out, (int(kp.x), int(kp.y)), 5, color, -1)
    return out


def draw_exercise_hud(frame: np.ndarray, metrics: Dict) -> np.ndarray:
    """
    يرسم شريط HUD بسيط: Reps, Angle, Phase, Status, Feedback.
    لا يعتمد على الواجهة، فقط OpenCV.
    """
    out = frame.copy()
    h, w = out.shape[:2]

    cv2.rectangle(out, (10, 10), (w - 10, 50), (0, 0, 0), -1)

    angle = metrics.get("angle")
    angle_txt = f"{angle:.0f}" if isinstance(angle, (int, float)) else "-"
    line1 = f"Reps {metrics.get('reps', 0)} | Angle {angle_txt} | Phase {metrics.get('phase') or '-'}"
    cv2.putText(out, line1, (20, 40), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 255, 180), 2, cv2.LINE_AA)

    y = 80
    status = metrics.get("status")
    if status:
        cv2.putText(out, status, (20, y), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (255, 220, 0), 2, cv2.LINE_AA)
        y += 40

    feedback = metrics.get("feedback")
    if feedback:
        cv2.putText(out, feedback, (20, y), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 200, 255), 2, cv2.LINE_AA)

    return out
