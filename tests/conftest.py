import math

import pytest

from fitquest.common.keypoints import KeypointFrame

CONF = 0.9


def triple(a, b, c, angle, origin=(300.0, 300.0), length=100.0, conf=CONF):
    """Three joints whose angle at b is exactly `angle` degrees (a straight above b)."""
    bx, by = origin
    rad = math.radians(-90.0 + angle)
    return {
        a: (bx, by - length, conf),
        b: (bx, by, conf),
        c: (bx + length * math.cos(rad), by + length * math.sin(rad), conf),
    }


class PoseBuilder:
    """Synthetic KeypointFrames for each exercise rule."""

    def pushup(self, left, right=None, ts=None, conf=CONF):
        right = left if right is None else right
        pts = triple("left_shoulder", "left_elbow", "left_wrist", left, (200.0, 300.0), conf=conf)
        pts.update(triple("right_shoulder", "right_elbow", "right_wrist", right, (400.0, 300.0), conf=conf))
        return KeypointFrame.from_mapping(pts, ts)

    def torso(self, angle, ts=None, conf=CONF):
        return KeypointFrame.from_mapping(triple("left_shoulder", "left_hip", "left_knee", angle, conf=conf), ts)

    def squat(self, left, right=None, ts=None):
        right = left if right is None else right
        pts = triple("left_hip", "left_knee", "left_ankle", left, (200.0, 300.0))
        pts.update(triple("right_hip", "right_knee", "right_ankle", right, (400.0, 300.0)))
        return KeypointFrame.from_mapping(pts, ts)

    def lunge(self, thigh_angle, ts=None):
        kx, ky = 300.0, 300.0
        rad = math.radians(90.0 - thigh_angle)
        return KeypointFrame.from_mapping({
            "left_knee": (kx, ky, CONF),
            "left_hip": (kx + 100.0 * math.cos(rad), ky + 100.0 * math.sin(rad), CONF),
            "right_knee": (kx + 80.0, ky, CONF),
        }, ts)

    def sword(self, raised, ts=None):
        if raised:
            pts = {"right_shoulder": (300.0, 200.0, CONF),
                   "right_elbow": (300.0, 130.0, CONF),
                   "right_wrist": (300.0, 60.0, CONF)}
        else:
            pts = {"right_shoulder": (300.0, 200.0, CONF),
                   "right_elbow": (330.0, 230.0, CONF),
                   "right_wrist": (300.0, 260.0, CONF)}
        return KeypointFrame.from_mapping(pts, ts)


@pytest.fixture
def pose():
    return PoseBuilder()
