"""
Calendar grid layout.

Pure functions: column width and columns-per-row from the container
width, viewport class and card scale, and splitting days into rows.
"""

import math
from typing import Sequence, TypeVar

from config.calendar import (
    LAYOUT_CONFIG,
    MOBILE_MAX_COLUMNS,
    MOBILE_MIN_COLUMNS,
)
from exceptions import ValidationError
from models.calendar import LayoutCalculation

T = TypeVar("T")


def calculate_columns_per_row(
    container_width: float,
    is_mobile: bool = False,
    card_scale: float = 1.0
) -> LayoutCalculation:
    """
    Compute column width and number of columns per row.

    Narrow viewports resize columns with the card scale and always show
    2-3 columns. Wide viewports keep a fixed column width (cards are
    scaled visually) and only the column count reacts to the scale.

    Args:
        container_width: Calendar container width in px
        is_mobile: Narrow viewport branch
        card_scale: Card zoom factor (0.7 - 1.5)

    Returns:
        LayoutCalculation
    """
    gap = LAYOUT_CONFIG["COLUMN_GAP"]
    available_width = container_width - LAYOUT_CONFIG["CONTAINER_PADDING"]

    if is_mobile:
        scaled_min_width = LAYOUT_CONFIG["MOBILE_MIN_COLUMN_WIDTH"] * card_scale
        scaled_max_width = LAYOUT_CONFIG["MOBILE_MAX_COLUMN_WIDTH"] * card_scale

        # Very narrow: two columns, never below the scaled minimum
        if available_width < scaled_min_width * 2 + gap:
            width = max(scaled_min_width, math.floor((available_width - gap) / 2))
            return LayoutCalculation(column_width=width, columns_per_row=MOBILE_MIN_COLUMNS)

        cols = math.floor((available_width + gap) / (scaled_min_width + gap))
        cols = max(MOBILE_MIN_COLUMNS, min(cols, MOBILE_MAX_COLUMNS))

        width = min(
            scaled_max_width,
            math.floor((available_width - gap * (cols - 1)) / cols)
        )
        return LayoutCalculation(column_width=width, columns_per_row=cols)

    desktop_width = LAYOUT_CONFIG["DESKTOP_COLUMN_WIDTH"]
    visual_card_width = desktop_width * card_scale

    cols = max(1, math.floor((available_width + gap) / (visual_card_width + gap)))

    return LayoutCalculation(column_width=desktop_width, columns_per_row=cols)


def group_days_into_rows(days: Sequence[T], columns_per_row: int) -> list[list[T]]:
    """
    Split days into consecutive rows of `columns_per_row`.

    The last row may be shorter.
    """
    if columns_per_row < 1:
        raise ValidationError(
            message="columns_per_row must be at least 1",
            code="CALENDAR_INVALID_COLUMNS",
            details={"columns_per_row": columns_per_row}
        )

    return [list(days[i:i + columns_per_row]) for i in range(0, len(days), columns_per_row)]


def is_mobile_device(width: float) -> bool:
    """Narrow viewport check against the mobile breakpoint."""
    return width <= LAYOUT_CONFIG["MOBILE_BREAKPOINT"]


def calculate_row_width(column_width: float, columns_per_row: int) -> float:
    """Total row width including gaps."""
    return column_width * columns_per_row + LAYOUT_CONFIG["COLUMN_GAP"] * (columns_per_row - 1)
