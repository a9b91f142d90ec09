import math
from typing import Tuple

from fitquest.common.config import PLUMB_LENGTH

Point = Tuple[float, float]


def angle_at(a: Point, b: Point, c: Point) -> float:
    """Angle at vertex b between rays b->a and b->c, in [0, 180] degrees.

    Coincident points give whatever atan2(0, 0) gives (0); callers gate on
    keypoint confidence instead of checking segment length here.
    """
    radians = math.atan2(c[1] - b[1], c[0] - b[0]) - math.atan2(a[1] - b[1], a[0] - b[0])
    angle = abs(math.degrees(radians))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def plumb_below(p: Point, length: float = PLUMB_LENGTH) -> Point:
    # image y grows downward
    return (p[0], p[1] + length)
