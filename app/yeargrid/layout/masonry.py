"""Square-tile masonry packing (container-first).

This module is intentionally UI-framework agnostic.

Goal: given a *known* container size and the items of one group, choose a
column count and a tile size so that every item renders as a square tile,
packed shortest-column-first, filling the container as closely as possible
without vertical overflow.

Aspect ratios are accepted so callers can pass what they know, but tiles are
always square; a ratio changing from unknown to known only means the caller
should pack again.

UI layers (Qt/web) apply the resulting placements as geometry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from app.yeargrid.layout.columns import (
    LayoutParameters,
    base_item_width,
    choose_columns,
    shortest_column,
    simulate_column_heights,
)

DEFAULT_ASPECT_RATIO = 1.2
MIN_SCALE = 0.1
MAX_SCALE = 1.0
REFINE_ITERATIONS = 10


@dataclass(frozen=True)
class Placement:
    index: int
    column: int
    row: int
    x: float
    y: float
    width: float
    height: float

    def scaled(self, factor: float) -> "Placement":
        return Placement(
            index=self.index,
            column=self.column,
            row=self.row,
            x=self.x * factor,
            y=self.y * factor,
            width=self.width * factor,
            height=self.height * factor,
        )


@dataclass(frozen=True)
class GridLayout:
    """Result of one packing run.

    columns == 0 and no placements means nothing was laid out (container not
    measured yet, or no items). gutter_px is the spacing as laid out, so it
    shrinks along with the tiles when the safety shrink runs.
    """

    columns: int = 0
    scale: float = 0.0
    safety_scale: float = 1.0
    gutter_px: float = 0.0
    placements: Tuple[Placement, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.placements

    @property
    def content_height(self) -> float:
        """Bottom edge of the lowest tile."""
        return max((p.y + p.height for p in self.placements), default=0.0)

    @property
    def max_column_height(self) -> float:
        """Tallest column, counting the gutter below each tile."""
        return max_column_height(self.placements, self.gutter_px)


def normalize_aspect_ratios(aspect_ratios: Sequence[Optional[float]]) -> List[float]:
    """Replace unknown or non-positive ratios with the default."""
    return [r if r is not None and r > 0 else DEFAULT_ASPECT_RATIO for r in aspect_ratios]


def _fits(
    *, item_count: int, columns: int, item_width: float, gutter_px: float, container_height: float
) -> bool:
    heights = simulate_column_heights(
        item_count=item_count, columns=columns, item_width=item_width, gutter_px=gutter_px
    )
    return max(heights) <= container_height


def refine_scale(
    *,
    container_width: float,
    container_height: float,
    item_count: int,
    columns: int,
    coarse_scale: float,
    params: LayoutParameters,
) -> float:
    """Binary-search the largest scale in [0.1, 1.0] whose packing fits.

    Runs a fixed number of iterations. If no tested scale fits, the coarse
    scale is returned unchanged and the safety shrink has to catch overflow.
    """

    base = base_item_width(container_width, columns, params.gutter_px)
    lo, hi = MIN_SCALE, MAX_SCALE
    best = coarse_scale

    for _ in range(REFINE_ITERATIONS):
        mid = (lo + hi) / 2
        if _fits(
            item_count=item_count,
            columns=columns,
            item_width=base * mid,
            gutter_px=params.gutter_px,
            container_height=container_height,
        ):
            best = mid
            lo = mid
        else:
            hi = mid

    return best


def place_items(
    *, item_count: int, columns: int, item_width: float, gutter_px: float
) -> List[Placement]:
    """Assign each item to the shortest column (lowest index on ties).

    Must follow exactly the rule used by simulate_column_heights, otherwise
    the heights predicted while searching would not match the result.
    """

    if columns <= 0:
        raise ValueError("columns must be > 0")

    col_x = [c * (item_width + gutter_px) for c in range(columns)]
    col_heights = [0.0] * columns
    col_rows = [0] * columns

    placements: List[Placement] = []
    for index in range(item_count):
        col = shortest_column(col_heights)
        placements.append(
            Placement(
                index=index,
                column=col,
                row=col_rows[col],
                x=col_x[col],
                y=col_heights[col],
                width=item_width,
                height=item_width,
            )
        )
        col_heights[col] += item_width + gutter_px
        col_rows[col] += 1

    return placements


def max_column_height(placements: Sequence[Placement], gutter_px: float) -> float:
    """Tallest column, counting the gutter below each tile."""
    if not placements:
        return 0.0
    return max(p.y + p.height + gutter_px for p in placements)


def apply_safety_shrink(
    placements: Sequence[Placement], *, container_height: float, gutter_px: float
) -> Tuple[List[Placement], float]:
    """Uniformly shrink placements that still overflow the container.

    Returns (placements, factor); factor is 1.0 when nothing overflowed.
    """

    tallest = max_column_height(placements, gutter_px)
    if tallest <= container_height:
        return list(placements), 1.0

    factor = container_height / tallest
    return [p.scaled(factor) for p in placements], factor


def pack_grid(
    container_width: float,
    container_height: float,
    aspect_ratios: Sequence[Optional[float]],
    params: Optional[LayoutParameters] = None,
) -> GridLayout:
    """Compute square-tile placements for one group.

    Returns an empty GridLayout when the container has no area or there are
    no items; packing a group never fails because of a single item.
    """

    params = params or LayoutParameters()

    if container_width <= 0 or container_height <= 0:
        logger.debug("Skipping layout for unmeasured container {}x{}", container_width, container_height)
        return GridLayout()

    ratios = normalize_aspect_ratios(aspect_ratios)
    if not ratios:
        return GridLayout()

    chosen = choose_columns(
        container_width=container_width,
        container_height=container_height,
        item_count=len(ratios),
        params=params,
    )
    if chosen is None:
        logger.warning(
            "Container {}x{} too narrow for {} columns with {}px gutters",
            container_width,
            container_height,
            params.min_columns,
            params.gutter_px,
        )
        # Zero-size tiles stacked at the origin: every item still gets a place.
        placements = place_items(
            item_count=len(ratios), columns=params.min_columns, item_width=0.0, gutter_px=0.0
        )
        return GridLayout(columns=params.min_columns, scale=1.0, placements=tuple(placements))

    columns, coarse = chosen
    scale = refine_scale(
        container_width=container_width,
        container_height=container_height,
        item_count=len(ratios),
        columns=columns,
        coarse_scale=coarse,
        params=params,
    )

    item_width = base_item_width(container_width, columns, params.gutter_px) * scale
    placements = place_items(
        item_count=len(ratios), columns=columns, item_width=item_width, gutter_px=params.gutter_px
    )
    placements, safety = apply_safety_shrink(
        placements, container_height=container_height, gutter_px=params.gutter_px
    )
    if safety < 1.0:
        logger.debug("Safety shrink {:.4f} applied to {} items", safety, len(placements))

    return GridLayout(
        columns=columns,
        scale=scale,
        safety_scale=safety,
        gutter_px=params.gutter_px * safety,
        placements=tuple(placements),
    )
