"""Pure functions for donut chart geometry and slice selection.

The chart is drawn in a square, slices start at 12 o'clock and run
clockwise, each sized in proportion to its category's total. A tap on the
ring toggles the category under it in the selection set.

Angles are in degrees measured clockwise from 12 o'clock, in ``[0, 360)``.
Screen coordinates grow rightwards (x) and downwards (y).
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Sequence

from spendeasy.domain.aggregate import Granularity, grand_total
from spendeasy.domain.models import Category, CategoryTotal, Money

Point = tuple[float, float]
Selection = frozenset[Category]

DEFAULT_CHART_SIZE = 280.0
GOLDEN_HOLE_RATIO = 0.618


@dataclass(frozen=True)
class ChartGeometry:
    """Immutable donut chart dimensions."""

    size: float = DEFAULT_CHART_SIZE
    hole_ratio: float = GOLDEN_HOLE_RATIO

    @property
    def center(self) -> Point:
        return (self.size / 2, self.size / 2)

    @property
    def outer_radius(self) -> float:
        return self.size / 2

    @property
    def inner_radius(self) -> float:
        return self.outer_radius * self.hole_ratio


@dataclass(frozen=True)
class Slice:
    """Immutable angular extent of one category."""

    category: Category
    start_angle: float
    end_angle: float

    def contains(self, angle: float) -> bool:
        return self.start_angle <= angle < self.end_angle


def layout_slices(totals: Sequence[CategoryTotal]) -> list[Slice]:
    """Lay out slices in order, clockwise from 12 o'clock.

    Args:
        totals: Ordered category totals.

    Returns:
        One slice per category, or an empty list when there is nothing to
        draw (no categories or a zero grand total).
    """
    grand = grand_total(totals)
    if grand <= 0:
        return []

    slices: list[Slice] = []
    slice_start = 0.0
    for item in totals:
        slice_width = 360.0 * float(item.total_amount / grand)
        slices.append(Slice(item.category, slice_start, slice_start + slice_width))
        slice_start += slice_width

    # Close the ring exactly on the last slice with a width; zero-width slices after it sit at 360
    last_drawn = max(i for i, item in enumerate(totals) if item.total_amount > 0)
    for i in range(last_drawn, len(slices)):
        start = slices[i].start_angle if i == last_drawn else 360.0
        slices[i] = Slice(slices[i].category, start, 360.0)
    return slices


def tap_angle(point: Point, geometry: ChartGeometry = ChartGeometry()) -> float | None:
    """Convert a tap position to an angle on the ring.

    Args:
        point: Tap coordinates within the chart square.
        geometry: Chart dimensions.

    Returns:
        Angle clockwise from 12 o'clock, or None if the tap fell inside the
        hole or outside the ring.
    """
    cx, cy = geometry.center
    dx = point[0] - cx
    dy = point[1] - cy
    distance = math.sqrt(dx * dx + dy * dy)

    if distance < geometry.inner_radius or distance > geometry.outer_radius:
        return None

    raw_angle = math.degrees(math.atan2(dy, dx))
    if raw_angle < 0:
        raw_angle += 360.0

    # atan2 measures from 3 o'clock; rotate so 0 is at the top
    return (raw_angle + 90.0) % 360.0


def category_at(
    point: Point,
    totals: Sequence[CategoryTotal],
    geometry: ChartGeometry = ChartGeometry(),
) -> Category | None:
    """Find the category whose slice lies under a tap.

    Returns:
        The hit category, or None for a miss or an empty chart.
    """
    angle = tap_angle(point, geometry)
    if angle is None:
        return None

    for chart_slice in layout_slices(totals):
        if chart_slice.contains(angle):
            return chart_slice.category
    return None


def toggle(selection: Selection, category: Category) -> Selection:
    """Add the category if absent, remove it if present."""
    if category in selection:
        return selection - {category}
    return selection | {category}


def hit_test(
    point: Point,
    totals: Sequence[CategoryTotal],
    selection: Selection = frozenset(),
    geometry: ChartGeometry = ChartGeometry(),
) -> Selection:
    """Apply a tap to the selection.

    Args:
        point: Tap coordinates within the chart square.
        totals: Ordered category totals the chart was drawn from.
        selection: Current selection.
        geometry: Chart dimensions.

    Returns:
        New selection with the tapped category toggled, or the unchanged
        selection if the tap missed every slice.
    """
    category = category_at(point, totals, geometry)
    if category is None:
        return selection
    return toggle(selection, category)


def selection_total(selection: Selection, totals: Sequence[CategoryTotal]) -> Money:
    """Total of the selected categories, or of everything when none is selected."""
    if not selection:
        return grand_total(totals)
    return Money(sum((t.total_amount for t in totals if t.category in selection), Decimal(0)))


def selection_label(selection: Selection) -> str:
    """Centre label for the chart."""
    if not selection:
        return "Total"
    if len(selection) == 1:
        return next(iter(selection)).value
    return f"{len(selection)} Categories"


@dataclass
class DonutSelection:
    """Selection state bound to the active period filter.

    Changing the reference date or granularity clears the selection.
    """

    reference_date: datetime
    granularity: Granularity
    geometry: ChartGeometry = field(default_factory=ChartGeometry)
    selected: Selection = frozenset()

    def set_filter(self, reference_date: datetime, granularity: Granularity) -> None:
        if (reference_date, granularity) != (self.reference_date, self.granularity):
            self.selected = frozenset()
        self.reference_date = reference_date
        self.granularity = granularity

    def tap(self, point: Point, totals: Sequence[CategoryTotal]) -> Selection:
        self.selected = hit_test(point, totals, self.selected, self.geometry)
        return self.selected

    def clear(self) -> None:
        self.selected = frozenset()
