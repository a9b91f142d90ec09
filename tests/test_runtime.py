import numpy as np
import pytest

pytest.importorskip("cv2")
pytest.importorskip("mediapipe")
pytest.importorskip("PySide6")

from fitquest.common.config import RuntimeSettings  # noqa: E402
from fitquest.common.rules import ExerciseType  # noqa: E402
from fitquest.runtime.launcher import get_worker  # noqa: E402
from fitquest.runtime.pipelines.exercise_pipeline import _ExerciseWorker  # noqa: E402
from fitquest.runtime.registry import REGISTRY, get_pipeline_factory  # noqa: E402


class _ScriptedPose:
    def __init__(self, frames):
        self.frames = list(frames)
        self.closed = False

    def keypoints(self, frame_bgr, timestamp=None):
        return self.frames.pop(0)

    def close(self):
        self.closed = True


def test_registry_covers_every_exercise():
    assert set(REGISTRY) == {ex.value for ex in ExerciseType}
    assert get_pipeline_factory(" PushUp ") is REGISTRY["pushup"]
    assert get_pipeline_factory("burpee") is None


def test_unknown_exercise_has_no_worker():
    assert get_worker("burpee", 0) is None


def test_worker_emits_rep_events(pose):
    script = _ScriptedPose([pose.pushup(90), pose.pushup(170), None])
    worker = _ExerciseWorker(0, RuntimeSettings(), "pushup", pose_service=script)
    image = np.zeros((480, 640, 3), dtype=np.uint8)

    down = worker.infer_one(image)
    assert down["events"] == [("Phase", {"exercise": "pushup", "phase": "down"})]
    assert down["metrics"]["status"] == "Down position"

    up = worker.infer_one(image)
    assert up["events"][0][0] == "Rep"
    assert up["events"][0][1]["count"] == 1
    assert up["overlay"].shape == image.shape

    lost = worker.infer_one(image)
    assert lost["events"] == []
    assert lost["metrics"]["feedback"] == "Position yourself fully in frame"
    assert worker.final_count() == 1

    worker.release_models()
    assert script.closed
