import math

from .base import DegenerateGeometry, EyeLandmarks
from .geometry import distance


def calculate_ear(eye: EyeLandmarks) -> float:
    """
    Eye Aspect Ratio for one eye.
    - EAR = (|p1-p5| + |p2-p4|) / (2 * |p0-p3|)
    - Lower means more closed; the scale of the landmarks cancels out.

    Raises DegenerateGeometry when the two corners coincide, so the caller
    can skip the frame instead of dividing by zero.
    """
    vertical1 = distance(eye[1], eye[5])
    vertical2 = distance(eye[2], eye[4])
    horizontal = distance(eye[0], eye[3])
    if horizontal == 0:
        raise DegenerateGeometry("Eye corners coincide; EAR is undefined")
    ear = (vertical1 + vertical2) / (2.0 * horizontal)
    # NaN/inf coordinates must not reach the rolling history
    if not math.isfinite(ear):
        raise DegenerateGeometry(f"Non-finite EAR ({ear})")
    return ear
