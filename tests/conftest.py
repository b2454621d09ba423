"""Shared test fixtures for viaplate."""

from __future__ import annotations

from typing import Callable

import numpy as np
import pytest

from viaplate.core.models import GridConfig, Point

HIGH_COLOR = (80, 20, 120)  # 100% viability reference
LOW_COLOR = (250, 220, 60)  # 0% viability reference
BACKGROUND = (128, 128, 128)

PITCH = 40
MARGIN = 20
DRAWN_RADIUS = 15


def draw_plate(
    colors: dict[tuple[int, int], tuple[int, int, int]],
    rows: int,
    cols: int,
    pitch: int = PITCH,
    margin: int = MARGIN,
    radius: int = DRAWN_RADIUS,
) -> np.ndarray:
    """Render filled discs on a gray background, one per (row, col) key."""
    height = margin * 2 + pitch * (rows - 1)
    width = margin * 2 + pitch * (cols - 1)
    image = np.empty((height, width, 3), dtype=np.uint8)
    image[:] = BACKGROUND
    ys, xs = np.mgrid[0:height, 0:width]
    for (row, col), color in colors.items():
        cx = margin + col * pitch
        cy = margin + row * pitch
        disc = (xs - cx) ** 2 + (ys - cy) ** 2 <= radius ** 2
        image[disc] = color
    return image


@pytest.fixture
def plate_grid() -> GridConfig:
    """Grid matching images produced by ``draw_plate`` with default spacing."""
    return GridConfig(
        origin=Point(MARGIN, MARGIN), u=Point(PITCH, 0), v=Point(0, PITCH),
    )


@pytest.fixture
def plate_factory() -> Callable[..., np.ndarray]:
    return draw_plate


@pytest.fixture
def dose_plate() -> np.ndarray:
    """A 4x4 plate whose rows average 100, 100, 75 and 25% viability.

    Row A is a blank row, rows B-D are dosed at 1, 10 and 100.
    A1 holds the 100% reference color, D4 the 0% reference color.
    """
    layout = [
        "HHHH",
        "HHHH",
        "HHHL",
        "HLLL",
    ]
    colors = {}
    for row, line in enumerate(layout):
        for col, ch in enumerate(line):
            colors[(row, col)] = HIGH_COLOR if ch == "H" else LOW_COLOR
    return draw_plate(colors, rows=4, cols=4)


@pytest.fixture
def dose_concentrations() -> list[float]:
    return [0.0, 1.0, 10.0, 100.0]


@pytest.fixture
def high_color() -> tuple[int, int, int]:
    return HIGH_COLOR


@pytest.fixture
def low_color() -> tuple[int, int, int]:
    return LOW_COLOR
