"""Well grid geometry: (row, col) indices to pixel-space centers."""

from __future__ import annotations

import math
import string

from viaplate.core.exceptions import InvalidRadiusError
from viaplate.core.models import GridConfig, Point

# Fraction of the well pitch used as sampling radius. Kept well below 0.5
# so samples stay clear of well walls and rim glare.
WELL_RADIUS_FACTOR = 0.30


def well_label(row: int, col: int) -> str:
    """Human-readable well id: row letter plus 1-based column, e.g. "C10".

    Rows past Z continue spreadsheet-style (AA, AB, ...).
    """
    if row < 0 or col < 0:
        raise ValueError(f"Well indices must be non-negative, got ({row}, {col})")
    letters = ""
    n = row + 1
    while n:
        n, rem = divmod(n - 1, 26)
        letters = string.ascii_uppercase[rem] + letters
    return f"{letters}{col + 1}"


def row_label(row: int) -> str:
    """Row letter for a zero-based row index."""
    return well_label(row, 0)[:-1]


def grid_from_corners(
    top_left: Point,
    top_right: Point,
    bottom_left: Point,
    rows: int,
    cols: int,
) -> GridConfig:
    """Derive the grid from the centers of three corner wells.

    Args:
        top_left: Center of well A1.
        top_right: Center of the last well in row A.
        bottom_left: Center of the first well in the last row.
        rows: Number of rows (>= 2).
        cols: Number of columns (>= 2).

    Raises:
        ValueError: If fewer than two rows or columns are given.
    """
    if rows < 2 or cols < 2:
        raise ValueError(
            f"Corner calibration needs at least 2 rows and 2 columns, got {rows}x{cols}"
        )
    u = (top_right - top_left).scaled(1.0 / (cols - 1))
    v = (bottom_left - top_left).scaled(1.0 / (rows - 1))
    return GridConfig(origin=top_left, u=u, v=v)


def well_radius(grid: GridConfig, factor: float = WELL_RADIUS_FACTOR) -> float:
    """Sampling radius shared by all wells: ``factor * min(|u|, |v|)``.

    Raises:
        InvalidRadiusError: If the radius is zero or not finite.
    """
    radius = factor * min(grid.u.magnitude, grid.v.magnitude)
    if not math.isfinite(radius) or radius <= 0:
        raise InvalidRadiusError(radius)
    return radius


def well_centers(grid: GridConfig, rows: int, cols: int) -> list[tuple[int, int, Point]]:
    """All (row, col, center) triples in row-major order."""
    return [
        (row, col, grid.center(row, col))
        for row in range(rows)
        for col in range(cols)
    ]
