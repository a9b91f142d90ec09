# fitquest/common/workers.py
from __future__ import annotations

import logging
import sys
import time
from typing import Any, Dict, Optional, Union

import cv2
import numpy as np
from PySide6.QtCore import QThread, Signal

logger = logging.getLogger(__name__)


def open_capture(source: Union[int, str]) -> cv2.VideoCapture:
    """Camera index or video path -> VideoCapture (may be closed; caller checks isOpened)."""
    if isinstance(source, int) and sys.platform.startswith("win"):
        return cv2.VideoCapture(source, cv2.CAP_DSHOW)
    return cv2.VideoCapture(source)


class BaseModelWorker(QThread):
    """
    حلقة جلسة التمرين داخل QThread: قراءة الإطار، الاستدلال، ثم إرسال النتائج للواجهة.

    Signals:
      frame_ready(np.ndarray)   الإطار بعد رسم الـ HUD
      metrics_ready(dict)       {"fps", "reps", "angle", "phase", "status", "feedback"}
      event(str, dict)          ("Rep", {...}) / ("Phase", {...})
      error(str)
      session_finished(int)     العدد النهائي، يُرسل مرة واحدة مهما كان سبب التوقف

    Subclasses override load_models / infer_one / final_count / release_models.
    """
    frame_ready = Signal(np.ndarray)
    metrics_ready = Signal(dict)
    event = Signal(str, dict)
    error = Signal(str)
    session_finished = Signal(int)

    def __init__(self, source: Union[int, str], settings_obj):
        super().__init__()
        self.source = source
        self.settings = settings_obj
        self._running = False
        self._cap: Optional[cv2.VideoCapture] = None

    def load_models(self) -> None:
        pass

    def preprocess(self, frame: np.ndarray) -> np.ndarray:
        if getattr(self.settings, "flip_camera", False):
            return cv2.flip(frame, 1)
        return frame

    def infer_one(self, frame: np.ndarray) -> Dict[str, Any]:
        """Returns {"overlay": ndarray | None, "metrics": dict, "events": [(name, payload), ...]}."""
        return {"overlay": frame, "metrics": {}, "events": []}

    def final_count(self) -> int:
        return 0

    def release_models(self) -> None:
        pass

    def stop(self) -> None:
        self._running = False

    def _publish(self, frame: np.ndarray, out: Dict[str, Any], fps: float) -> None:
        overlay = out.get("overlay")
        self.frame_ready.emit(frame if overlay is None else overlay)
        self.metrics_ready.emit({"fps": fps, **out.get("metrics", {})})
        for name, payload in out.get("events", ()):
            self.event.emit(name, payload)

    def run(self) -> None:
        self._cap = open_capture(self.source)
        if not self._cap.isOpened():
            self.error.emit(f"Failed to open source: {self.source}")
            self._cap = None
            self.session_finished.emit(0)
            return

        self._running = True
        try:
            self.load_models()
            period = 1.0 / max(1, int(getattr(self.settings, "target_fps", 30)))
            started, frames = time.time(), 0

            while self._running:
                tick = time.time()
                ok, frame = self._cap.read()
                if not ok:
                    logger.info("stream ended after %d frames", frames)
                    break

                out = self.infer_one(self.preprocess(frame))
                frames += 1
                self._publish(frame, out, frames / max(1e-6, time.time() - started))

                # pace to target_fps, not faster
                time.sleep(max(0.0, period - (time.time() - tick)))
        except Exception as e:
            logger.exception("exercise session failed")
            self.error.emit(f"Session error: {e}")
        finally:
            self._cap.release()
            self._cap = None
            self.release_models()
            self.session_finished.emit(self.final_count())
