"""Per-kind symbol scale multipliers and the map-unit sizes derived from them."""

from __future__ import annotations

import math
from dataclasses import dataclass

from course_designer.model.elements import ElementType

MIN_MULTIPLIER = 1
MAX_MULTIPLIER = 10
DEFAULT_MULTIPLIER = 5

# Base sizes in map units at multiplier 5.
BASE_START_SIZE = 30.0
BASE_CONTROL_RADIUS = 15.0
BASE_FINISH_OUTER_RADIUS = 18.0
FINISH_INNER_RADIUS_PROPORTION = 2 / 3
SYMBOL_BASE_LINE_WIDTH = 1.0
LEG_BASE_LINE_WIDTH = 0.75
UNCROSSABLE_EXTRA_LINE_WIDTH = 1.0
LEG_DASH_SEGMENT = 5.0
LEG_CONNECTION_GAP = 4.0
CONTROL_NUMBER_BASE_FONT_SIZE = 12.0
TEXT_GAP_ABOVE_CONTROL = 3.0

# Screen-space constants (pixels).
CLICK_TOLERANCE_PX = 5.0
MIN_LINE_WIDTH_PX = 0.5
MIN_UNCROSSABLE_WIDTH_PX = 0.7
MIN_DASH_PX = 1.0
MIN_FONT_PX = 6.0


def clamp_multiplier(value: object) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_MULTIPLIER
    return max(MIN_MULTIPLIER, min(MAX_MULTIPLIER, number))


def screen_width(map_units: float, zoom: float, minimum: float = MIN_LINE_WIDTH_PX) -> float:
    """Convert a map-unit stroke width to pixels, never thinner than ``minimum``."""
    if zoom <= 0:
        return minimum
    return max(minimum, map_units / zoom)


@dataclass(frozen=True)
class SymbolScales:
    start: int = DEFAULT_MULTIPLIER
    control: int = DEFAULT_MULTIPLIER
    finish: int = DEFAULT_MULTIPLIER

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", clamp_multiplier(self.start))
        object.__setattr__(self, "control", clamp_multiplier(self.control))
        object.__setattr__(self, "finish", clamp_multiplier(self.finish))

    def factor(self, kind: ElementType) -> float:
        if kind is ElementType.START:
            return self.start / DEFAULT_MULTIPLIER
        if kind is ElementType.FINISH:
            return self.finish / DEFAULT_MULTIPLIER
        # Controls, legs and the leg gap all follow the control multiplier.
        return self.control / DEFAULT_MULTIPLIER

    # ------------------------------------------------------------------
    # Symbol sizes
    # ------------------------------------------------------------------
    @property
    def start_size(self) -> float:
        return BASE_START_SIZE * self.factor(ElementType.START)

    @property
    def control_radius(self) -> float:
        return BASE_CONTROL_RADIUS * self.factor(ElementType.CONTROL)

    @property
    def finish_outer_radius(self) -> float:
        return BASE_FINISH_OUTER_RADIUS * self.factor(ElementType.FINISH)

    @property
    def finish_inner_radius(self) -> float:
        return self.finish_outer_radius * FINISH_INNER_RADIUS_PROPORTION

    @property
    def start_inner_radius(self) -> float:
        """Radius of the circle inscribed in the start triangle."""
        return self.start_size * math.sqrt(3) / 6

    def symbol_line_width(self, kind: ElementType) -> float:
        return SYMBOL_BASE_LINE_WIDTH * self.factor(kind)

    # ------------------------------------------------------------------
    # Leg and label sizes
    # ------------------------------------------------------------------
    @property
    def leg_gap(self) -> float:
        return LEG_CONNECTION_GAP * self.factor(ElementType.CONTROL)

    @property
    def leg_line_width(self) -> float:
        return LEG_BASE_LINE_WIDTH * self.factor(ElementType.CONTROL)

    @property
    def uncrossable_line_width(self) -> float:
        return (LEG_BASE_LINE_WIDTH + UNCROSSABLE_EXTRA_LINE_WIDTH) * self.factor(
            ElementType.CONTROL
        )

    @property
    def leg_dash_segment(self) -> float:
        return LEG_DASH_SEGMENT * self.factor(ElementType.CONTROL)

    @property
    def control_font_size(self) -> float:
        return CONTROL_NUMBER_BASE_FONT_SIZE * self.factor(ElementType.CONTROL)

    @property
    def control_label_gap(self) -> float:
        return TEXT_GAP_ABOVE_CONTROL * self.factor(ElementType.CONTROL)

    def visual_radius(self, kind: ElementType) -> float:
        """Radius at which a leg drawn to a symbol of ``kind`` should stop (before the gap)."""
        if kind is ElementType.START:
            return self.start_inner_radius
        if kind is ElementType.CONTROL:
            return self.control_radius
        if kind is ElementType.FINISH:
            return self.finish_outer_radius
        return 0.0
