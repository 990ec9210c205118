import pytest

from blink_gate.app import config as config_mod
from blink_gate.models import FaceLandmarks, Point2D


OPEN = 0.30
CLOSED = 0.10
# eye corners at position 0 sit at x=100 and x=170, so the span is 70 and the midpoint 135
EYE_SPAN = 70.0
NOSE_MID_X = 135.0


def make_eye(ear: float, x0: float, width: float = 30.0, y: float = 100.0):
    h = ear * width / 2.0
    return (
        Point2D(x0, y),
        Point2D(x0 + width / 3, y - h),
        Point2D(x0 + 2 * width / 3, y - h),
        Point2D(x0 + width, y),
        Point2D(x0 + 2 * width / 3, y + h),
        Point2D(x0 + width / 3, y + h),
    )


def make_face(ear: float = OPEN, nose_dx: float = 0.0) -> FaceLandmarks:
    return FaceLandmarks(
        left_eye=make_eye(ear, 100.0),
        right_eye=make_eye(ear, 170.0),
        nose=(Point2D(NOSE_MID_X + nose_dx, 130.0), Point2D(NOSE_MID_X, 140.0)),
    )


def face_dict(face: FaceLandmarks) -> dict:
    return {
        "left_eye": [[p.x, p.y] for p in face.left_eye],
        "right_eye": [[p.x, p.y] for p in face.right_eye],
        "nose": [[p.x, p.y] for p in face.nose],
    }


def blink_pattern():
    """EAR per frame: open baseline with closures at frames 20, 25 and 30."""
    return [CLOSED if i in (20, 25, 30) else OPEN for i in range(60)]


@pytest.fixture(autouse=True)
def no_config_files(monkeypatch):
    monkeypatch.setattr(config_mod, "DEFAULT_CONFIG_PATHS", [])
