from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, NamedTuple, Optional, Tuple


EYE_POINTS = 6


class LivenessError(Exception):
    pass


class ConfigError(LivenessError, ValueError):
    pass


class DegenerateGeometry(LivenessError, ValueError):
    pass


class MalformedLandmarks(LivenessError, ValueError):
    pass


class SessionAlreadyTerminal(LivenessError, RuntimeError):
    pass


class TraceFormatError(LivenessError, ValueError):
    pass


class Point2D(NamedTuple):
    x: float
    y: float


# corner, upper-outer, upper-inner, corner, lower-inner, lower-outer
EyeLandmarks = Tuple[Point2D, ...]


class Verdict(str, Enum):
    NO_FACE = "NO_FACE"
    TRACKING = "TRACKING"
    LIVE = "LIVE"


class SessionState(str, Enum):
    AWAITING_FACE = "AWAITING_FACE"
    TRACKING = "TRACKING"
    LIVE = "LIVE"
    ABORTED = "ABORTED"


def to_point(raw: Any) -> Point2D:
    """Accepts Point2D, an (x, y) pair or a mapping with x/y keys."""
    if isinstance(raw, Point2D):
        return raw
    try:
        if isinstance(raw, dict):
            x, y = raw["x"], raw["y"]
        else:
            x, y = raw
        return Point2D(float(x), float(y))
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedLandmarks(f"Invalid landmark point: {raw!r}") from e


def to_points(raw: Iterable[Any]) -> Tuple[Point2D, ...]:
    try:
        return tuple(to_point(p) for p in raw)
    except TypeError as e:
        raise MalformedLandmarks(f"Invalid landmark sequence: {raw!r}") from e


@dataclass(frozen=True)
class FaceLandmarks:
    """One detected face as delivered by the landmark extractor.

    Only the eye contours and the nose are read. The nose sequence may hold
    the full nose bridge; position 0 is treated as the tip.
    """

    left_eye: EyeLandmarks
    right_eye: EyeLandmarks
    nose: Tuple[Point2D, ...]

    @classmethod
    def from_raw(cls, left_eye: Iterable[Any], right_eye: Iterable[Any], nose: Iterable[Any]) -> "FaceLandmarks":
        return cls(to_points(left_eye), to_points(right_eye), to_points(nose))

    @classmethod
    def from_dict(cls, data: Any) -> "FaceLandmarks":
        if not isinstance(data, dict):
            raise MalformedLandmarks(f"Face entry must be a mapping, got {type(data).__name__}")
        try:
            return cls.from_raw(data["left_eye"], data["right_eye"], data["nose"])
        except KeyError as e:
            raise MalformedLandmarks(f"Face entry missing {e.args[0]!r}") from e

    def validate(self) -> None:
        if len(self.left_eye) != EYE_POINTS or len(self.right_eye) != EYE_POINTS:
            raise MalformedLandmarks(
                f"Expected {EYE_POINTS} points per eye, got {len(self.left_eye)}/{len(self.right_eye)}"
            )
        if not self.nose:
            raise MalformedLandmarks("Nose landmarks are empty")

    @property
    def nose_tip(self) -> Point2D:
        return self.nose[0]


@dataclass
class FrameResult:
    verdict: Verdict
    blink_count: int
    is_facing_camera: bool
    state: SessionState
    ear: Optional[float] = None
