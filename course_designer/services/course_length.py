from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from course_designer.geometry_core import distance
from course_designer.model.elements import (
    CourseElement,
    LegElement,
    element_index,
    is_point_symbol,
)

# 72 points per inch * 39.3701 inches per metre: PDF points per metre at 1:1.
POINTS_PER_METER_AT_1_TO_1 = 2834.64567


class ScaleMode(str, Enum):
    NONE = "none"
    RATIO = "ratio"
    REFERENCE_LENGTH = "referenceLength"


@dataclass(frozen=True)
class MapScaleSettings:
    mode: ScaleMode = ScaleMode.NONE
    ratio_value: Optional[float] = None  # 15000 for 1:15000
    map_units: Optional[float] = None  # measured reference length on the map
    real_world_meters: Optional[float] = None

    def map_units_per_meter(self) -> Optional[float]:
        if self.mode is ScaleMode.RATIO and self.ratio_value and self.ratio_value > 0:
            return POINTS_PER_METER_AT_1_TO_1 / self.ratio_value
        if (
            self.mode is ScaleMode.REFERENCE_LENGTH
            and self.map_units
            and self.map_units > 0
            and self.real_world_meters
            and self.real_world_meters > 0
        ):
            return self.map_units / self.real_world_meters
        return None


def course_length_map_units(elements: Sequence[CourseElement]) -> float:
    """Sum of centre-to-centre leg lengths."""
    by_id = element_index(elements)
    total = 0.0
    for element in elements:
        if not isinstance(element, LegElement):
            continue
        start = by_id.get(element.from_id)
        end = by_id.get(element.to_id)
        if is_point_symbol(start) and is_point_symbol(end):
            total += distance(start.center, end.center)  # type: ignore[union-attr]
    return total


def course_length_meters(
    elements: Sequence[CourseElement], settings: MapScaleSettings
) -> Optional[float]:
    per_meter = settings.map_units_per_meter()
    if per_meter is None or per_meter <= 0:
        return None
    return course_length_map_units(elements) / per_meter


def format_course_length(length_meters: Optional[float]) -> str:
    if length_meters is None:
        return "Scale not set"
    if length_meters >= 1000:
        return f"{length_meters / 1000:.2f} km"
    return f"{length_meters:.0f} m"
