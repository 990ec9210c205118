import math

from .base import Point2D


def distance(p1: Point2D, p2: Point2D) -> float:
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def midpoint_x(p1: Point2D, p2: Point2D) -> float:
    return (p1.x + p2.x) / 2.0
