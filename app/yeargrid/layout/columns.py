"""Column-count selection for square-tile grid layouts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

DEFAULT_GUTTER_PX = 2
DEFAULT_MIN_COLUMNS = 8
DEFAULT_MAX_COLUMNS = 30


@dataclass(frozen=True)
class LayoutParameters:
    gutter_px: float = DEFAULT_GUTTER_PX
    min_columns: int = DEFAULT_MIN_COLUMNS
    max_columns: int = DEFAULT_MAX_COLUMNS

    def __post_init__(self) -> None:
        if self.gutter_px < 0:
            raise ValueError("gutter_px must be >= 0")
        if self.min_columns < 1:
            raise ValueError("min_columns must be >= 1")
        if self.min_columns > self.max_columns:
            raise ValueError("min_columns must be <= max_columns")


def base_item_width(container_width: float, columns: int, gutter_px: float) -> float:
    """Width of one column when `columns` share the container with gutters."""
    return (container_width - (columns - 1) * gutter_px) / columns


def shortest_column(heights: List[float]) -> int:
    # First occurrence of the minimum, so ties go to the lowest index.
    return heights.index(min(heights))


def simulate_column_heights(
    *, item_count: int, columns: int, item_width: float, gutter_px: float
) -> List[float]:
    """Pack `item_count` square tiles shortest-column-first, return heights."""
    heights = [0.0] * columns
    for _ in range(item_count):
        col = shortest_column(heights)
        heights[col] += item_width + gutter_px
    return heights


def choose_columns(
    *,
    container_width: float,
    container_height: float,
    item_count: int,
    params: LayoutParameters,
) -> Optional[Tuple[int, float]]:
    """Choose a column count and a coarse scale.

    Policy:
    - try column counts from min to max, ascending
    - the first count whose packing fits at full size wins (largest tiles)
    - otherwise keep the count that needs the least shrinking

    Returns (columns, scale), or None when no column count leaves any room
    for tiles (container narrower than its own gutters).
    """

    best: Optional[Tuple[int, float]] = None
    best_scale = 0.0

    for cols in range(params.min_columns, params.max_columns + 1):
        width = base_item_width(container_width, cols, params.gutter_px)
        if width <= 0:
            continue

        heights = simulate_column_heights(
            item_count=item_count,
            columns=cols,
            item_width=width,
            gutter_px=params.gutter_px,
        )
        tallest = max(heights)
        if tallest <= container_height:
            return cols, 1.0

        scale = container_height / tallest
        if scale > best_scale:
            best_scale = scale
            best = (cols, scale)

    return best
