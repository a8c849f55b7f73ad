from .primitives import (
    Point,
    adjusted_point_along_vector,
    distance,
    distance_to_segment_squared,
    is_left,
    is_point_on_leg,
    point_in_circle,
    point_in_polygon,
    point_in_start_symbol,
    rotate_about,
)

__all__ = [
    "Point",
    "distance",
    "point_in_circle",
    "point_in_start_symbol",
    "is_left",
    "point_in_polygon",
    "distance_to_segment_squared",
    "is_point_on_leg",
    "adjusted_point_along_vector",
    "rotate_about",
]
