import logging
from typing import Optional

from .base import Point2D
from .geometry import distance, midpoint_x


logger = logging.getLogger(__name__)


def nose_offset(nose: Point2D, left_corner: Point2D, right_corner: Point2D) -> Optional[float]:
    """Horizontal nose offset from the eye midpoint, as a fraction of eye span.

    None when the span is zero.
    """
    face_width = distance(left_corner, right_corner)
    if face_width == 0:
        return None
    return abs(nose.x - midpoint_x(left_corner, right_corner)) / face_width


def is_facing_camera(
    nose: Point2D,
    left_corner: Point2D,
    right_corner: Point2D,
    facing_threshold: float = 0.35,
) -> bool:
    offset = nose_offset(nose, left_corner, right_corner)
    if offset is None:
        # Undetermined pose counts as looking away
        logger.debug("Zero eye span, treating face as not facing camera")
        return False
    facing = offset < facing_threshold
    logger.debug("Nose offset %.4f facing=%s", offset, facing)
    return facing
