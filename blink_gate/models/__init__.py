from .base import (
    ConfigError,
    DegenerateGeometry,
    FaceLandmarks,
    FrameResult,
    LivenessError,
    MalformedLandmarks,
    Point2D,
    SessionAlreadyTerminal,
    SessionState,
    TraceFormatError,
    Verdict,
)
from .blink import BlinkDetector
from .ear import calculate_ear
from .geometry import distance, midpoint_x
from .head_pose import is_facing_camera, nose_offset

__all__ = [
    "ConfigError",
    "DegenerateGeometry",
    "FaceLandmarks",
    "FrameResult",
    "LivenessError",
    "MalformedLandmarks",
    "Point2D",
    "SessionAlreadyTerminal",
    "SessionState",
    "TraceFormatError",
    "Verdict",
    "BlinkDetector",
    "calculate_ear",
    "distance",
    "midpoint_x",
    "is_facing_camera",
    "nose_offset",
]
