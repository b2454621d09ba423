"""Data models for the viaplate core module."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

WELL_MEASURED = "measured"
WELL_UNMEASURED = "unmeasured"
WELL_UNCALIBRATED = "uncalibrated"


@dataclass(frozen=True)
class Point:
    """A pixel-space coordinate."""

    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def scaled(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    @property
    def magnitude(self) -> float:
        return float(np.hypot(self.x, self.y))


@dataclass(frozen=True)
class RGB:
    """An 8-bit sRGB color."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ValueError(f"RGB channel {name!r} must be an integer, got {value!r}")
            if not 0 <= value <= 255:
                raise ValueError(f"RGB channel {name!r} out of range [0, 255]: {value}")
            # Normalize numpy integers so results compare and serialize cleanly.
            object.__setattr__(self, name, int(value))

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @classmethod
    def from_array(cls, values) -> RGB:
        r, g, b = (int(v) for v in values)
        return cls(r, g, b)


@dataclass(frozen=True)
class GridConfig:
    """Affine well grid: origin is the center of well A1.

    Attributes:
        origin: Pixel-space center of well (row=0, col=0).
        u: Step vector from one column to the next.
        v: Step vector from one row to the next.
    """

    origin: Point
    u: Point
    v: Point

    def center(self, row: int, col: int) -> Point:
        """Pixel-space center of the well at (row, col)."""
        return Point(
            self.origin.x + col * self.u.x + row * self.v.x,
            self.origin.y + col * self.u.y + row * self.v.y,
        )


@dataclass(frozen=True)
class WellResult:
    """Measured color and viability of a single well.

    Attributes:
        id: Human label, row letter plus 1-based column (e.g. "B7").
        row: Zero-based row index.
        col: Zero-based column index.
        center: Pixel-space center used for sampling.
        avg_color: Robust representative color of the well.
        intensity: Clamped calibration projection in [0, 1].
        viability: ``intensity * 100``.
        pixel_count: Number of pixels sampled inside the well disk.
        status: "measured", "unmeasured" (no pixels sampled) or
            "uncalibrated" (reference colors indistinguishable).
    """

    id: str
    row: int
    col: int
    center: Point
    avg_color: RGB
    intensity: float
    viability: float
    pixel_count: int = 0
    status: str = WELL_MEASURED

    @property
    def is_measured(self) -> bool:
        return self.status == WELL_MEASURED


@dataclass(frozen=True)
class DosePoint:
    """Mean viability of one dosed row."""

    concentration: float
    viability: float


@dataclass(frozen=True)
class IC50Result:
    """Interpolated half-maximal inhibitory concentration."""

    value: float
    units: str


@dataclass(frozen=True)
class AnalysisResult:
    """Everything produced by one plate analysis run.

    Attributes:
        wells: Per-well results in row-major order.
        ic50: IC50 estimate, or None when it could not be determined.
        radius: Sampling radius in pixels used for every well.
        reference_low: Robust color of the 0% viability reference.
        reference_high: Robust color of the 100% viability reference.
        calibration_degenerate: True if the references were indistinguishable.
        ic50_failure: Why ``ic50`` is None (None when an IC50 was found).
    """

    wells: tuple[WellResult, ...]
    ic50: IC50Result | None
    radius: float
    reference_low: RGB
    reference_high: RGB
    calibration_degenerate: bool = False
    ic50_failure: str | None = None
    dose_points: tuple[DosePoint, ...] = field(default_factory=tuple)

    def well(self, well_id: str) -> WellResult:
        """Look up a well by its label.

        Raises:
            KeyError: If no well has that label.
        """
        for w in self.wells:
            if w.id == well_id:
                return w
        raise KeyError(f"Unknown well {well_id!r}")

    @property
    def row_count(self) -> int:
        return max((w.row for w in self.wells), default=-1) + 1

    @property
    def col_count(self) -> int:
        return max((w.col for w in self.wells), default=-1) + 1

    def viability_grid(self) -> np.ndarray:
        """Viabilities as a (rows, cols) float array."""
        grid = np.zeros((self.row_count, self.col_count), dtype=np.float64)
        for w in self.wells:
            grid[w.row, w.col] = w.viability
        return grid
