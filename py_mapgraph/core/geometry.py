"""Geometry primitives for the map graph.

Positions are quantized to a fixed number of decimals before they are used
as dictionary keys, so that floating point noise does not split one vertex
into several.
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Tuple

POSITION_DECIMALS = 3


class Point2(NamedTuple):
    """A position on the horizontal plane."""
    x: float
    y: float

    @classmethod
    def quantized(cls, x: float, y: float) -> "Point2":
        """Create a point rounded to POSITION_DECIMALS."""
        return cls(round(float(x), POSITION_DECIMALS), round(float(y), POSITION_DECIMALS))

    def to_3d(self, z: float = 0.0) -> "Point3":
        return Point3(self.x, self.y, z)


class Point3(NamedTuple):
    """A horizontal position plus elevation (z)."""
    x: float
    y: float
    z: float = 0.0

    @property
    def xy(self) -> Point2:
        return Point2(self.x, self.y)


@dataclass(frozen=True)
class Rect:
    """Axis aligned rectangle on the horizontal plane."""
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @classmethod
    def from_size(cls, width: float, height: float) -> "Rect":
        return cls(0.0, 0.0, float(width), float(height))

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def center(self) -> Point2:
        return Point2((self.x_min + self.x_max) / 2, (self.y_min + self.y_max) / 2)

    @property
    def top_left(self) -> Point2:
        return Point2(self.x_min, self.y_max)

    @property
    def top_right(self) -> Point2:
        return Point2(self.x_max, self.y_max)

    @property
    def bottom_left(self) -> Point2:
        return Point2(self.x_min, self.y_min)

    @property
    def bottom_right(self) -> Point2:
        return Point2(self.x_max, self.y_min)

    def quantized(self) -> "Rect":
        low = Point2.quantized(self.x_min, self.y_min)
        high = Point2.quantized(self.x_max, self.y_max)
        return Rect(low.x, low.y, high.x, high.y)

    def contains(self, x: float, y: float) -> bool:
        return self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max

    def on_boundary(self, point: Tuple[float, float]) -> bool:
        """True when either coordinate equals one of the rectangle extremes."""
        x, y = point[0], point[1]
        return x == self.x_min or x == self.x_max or y == self.y_min or y == self.y_max


def cross(origin, a, b) -> float:
    """
    Z component of (a - origin) x (b - origin).

    Positive when b lies counterclockwise of a as seen from origin.
    """
    return (a[0] - origin[0]) * (b[1] - origin[1]) - (a[1] - origin[1]) * (b[0] - origin[0])


def angle_from(center, point) -> float:
    """Polar angle of point around center, in radians."""
    return math.atan2(point[1] - center[1], point[0] - center[0])


def sqr_distance(a, b) -> float:
    """Squared distance on the horizontal plane."""
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy
