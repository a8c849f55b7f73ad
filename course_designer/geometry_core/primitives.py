from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class Point:
    """A position in map space (background image pixels, independent of zoom)."""

    x: float
    y: float

    def offset(self, dx: float, dy: float) -> "Point":
        return Point(self.x + dx, self.y + dy)


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def point_in_circle(point: Point, center: Point, radius: float) -> bool:
    return distance(point, center) <= radius


def point_in_start_symbol(
    point: Point, center: Point, symbol_size: float, tolerance: float
) -> bool:
    # The triangle is approximated by a circle of radius size * 0.4, which is
    # slightly generous near the edges and misses the tips.
    return point_in_circle(point, center, symbol_size * 0.4 + tolerance)


def is_left(p0: Point, p1: Point, p2: Point) -> float:
    """>0 when p2 is left of the line p0->p1, <0 when right, 0 when on it."""
    return (p1.x - p0.x) * (p2.y - p0.y) - (p2.x - p0.x) * (p1.y - p0.y)


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """Winding-number containment test; handles concave simple polygons."""
    winding = 0
    count = len(polygon)
    for idx in range(count):
        p1 = polygon[idx]
        p2 = polygon[(idx + 1) % count]
        if p1.y <= point.y:
            if p2.y > point.y and is_left(p1, p2, point) > 0:
                winding += 1
        elif p2.y <= point.y and is_left(p1, p2, point) < 0:
            winding -= 1
    return winding != 0


def distance_to_segment_squared(p: Point, v: Point, w: Point) -> float:
    dx = w.x - v.x
    dy = w.y - v.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return distance(p, v) ** 2

    t = ((p.x - v.x) * dx + (p.y - v.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return distance(p, Point(v.x + t * dx, v.y + t * dy)) ** 2


def is_point_on_leg(point: Point, start: Point, end: Point, threshold: float = 5.0) -> bool:
    return math.sqrt(distance_to_segment_squared(point, start, end)) <= threshold


def adjusted_point_along_vector(start: Point, end: Point, adjustment: float) -> Point:
    """Return the point ``adjustment`` units from ``start`` towards ``end``."""
    dx = end.x - start.x
    dy = end.y - start.y
    length = math.hypot(dx, dy)
    if length == 0:
        return start
    return Point(start.x + dx / length * adjustment, start.y + dy / length * adjustment)


def rotate_about(local: Point, center: Point, angle: float) -> Point:
    cos_r = math.cos(angle)
    sin_r = math.sin(angle)
    return Point(
        center.x + (local.x * cos_r - local.y * sin_r),
        center.y + (local.x * sin_r + local.y * cos_r),
    )
