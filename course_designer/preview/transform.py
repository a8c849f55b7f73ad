from __future__ import annotations

from dataclasses import dataclass

from course_designer.geometry_core import Point

MIN_ZOOM = 0.1
MAX_ZOOM = 10.0
ZOOM_STEP = 1.2


@dataclass(frozen=True)
class ViewTransform:
    """Map-space to screen-space mapping: ``screen = offset + map * scale``."""

    scale: float = 1.0
    offset: Point = Point(0.0, 0.0)

    def map_to_screen(self, p: Point) -> Point:
        return Point(self.offset.x + p.x * self.scale, self.offset.y + p.y * self.scale)

    def screen_to_map(self, p: Point) -> Point:
        if self.scale == 0:
            return Point(0.0, 0.0)
        return Point((p.x - self.offset.x) / self.scale, (p.y - self.offset.y) / self.scale)


def clamp_zoom(scale: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, scale))


def fit_to_size(content_size: tuple[float, float], viewport_size: tuple[float, float]) -> ViewTransform:
    width, height = content_size
    view_w, view_h = viewport_size
    if width <= 0 or height <= 0 or view_w <= 0 or view_h <= 0:
        return ViewTransform()

    scale = clamp_zoom(min(view_w / width, view_h / height))
    offset = Point((view_w - width * scale) * 0.5, (view_h - height * scale) * 0.5)
    return ViewTransform(scale=scale, offset=offset)


def pan(transform: ViewTransform, dx: float, dy: float) -> ViewTransform:
    return ViewTransform(scale=transform.scale, offset=transform.offset.offset(dx, dy))


def zoom(transform: ViewTransform, factor: float, anchor: Point) -> ViewTransform:
    """Zoom by ``factor`` keeping the map point under the screen ``anchor`` fixed."""
    if factor <= 0:
        return transform
    new_scale = clamp_zoom(transform.scale * factor)
    if new_scale == transform.scale:
        return transform

    map_anchor = transform.screen_to_map(anchor)
    offset = Point(anchor.x - map_anchor.x * new_scale, anchor.y - map_anchor.y * new_scale)
    return ViewTransform(scale=new_scale, offset=offset)
