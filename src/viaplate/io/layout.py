"""Plate layout files: grid geometry, calibration points and doses.

A layout is stored as YAML::

    rows: 8
    cols: 12
    grid:
      top_left: [112.0, 96.0]
      top_right: [1010.0, 101.0]
      bottom_left: [108.0, 620.0]
    references:
      low: [1010.0, 620.0]
      high: [112.0, 620.0]
    concentrations: [0, 0.1, 1, 10, 100, 1000, 10000, 0]
    units: nM

``grid`` may instead give ``origin``, ``u`` and ``v`` directly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from viaplate.core.exceptions import LayoutError
from viaplate.core.models import GridConfig, Point
from viaplate.plate.grid import WELL_RADIUS_FACTOR, grid_from_corners

DEFAULT_UNITS = "nM"


@dataclass(frozen=True)
class PlateLayout:
    """User-supplied plate geometry, calibration and dose information."""

    rows: int
    cols: int
    grid: GridConfig
    ref_low: Point
    ref_high: Point
    concentrations: tuple[float, ...] = field(default_factory=tuple)
    units: str = DEFAULT_UNITS
    radius_factor: float = WELL_RADIUS_FACTOR

    def __post_init__(self) -> None:
        if self.rows < 1 or self.cols < 1:
            raise LayoutError(f"Plate must have at least one row and column, got {self.rows}x{self.cols}")
        if len(self.concentrations) > self.rows:
            raise LayoutError(
                f"{len(self.concentrations)} concentrations given for {self.rows} rows"
            )
        # Rows without an entry are undosed.
        padded = tuple(float(c) for c in self.concentrations)
        padded += (0.0,) * (self.rows - len(padded))
        object.__setattr__(self, "concentrations", padded)

    def to_yaml(self, path: Path) -> None:
        """Serialize this layout to a YAML file."""
        layout_to_yaml(self, path)

    @classmethod
    def from_yaml(cls, path: Path) -> PlateLayout:
        """Deserialize a layout from a YAML file."""
        return layout_from_yaml(path)


def _point_to_list(p: Point) -> list[float]:
    return [float(p.x), float(p.y)]


def _parse_point(value: Any, key: str) -> Point:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise LayoutError(f"Invalid layout: '{key}' must be a [x, y] pair, got {value!r}")
    try:
        x, y = float(value[0]), float(value[1])
    except (TypeError, ValueError):
        raise LayoutError(f"Invalid layout: '{key}' must contain numbers, got {value!r}") from None
    if not (math.isfinite(x) and math.isfinite(y)):
        raise LayoutError(f"Invalid layout: '{key}' must be finite, got {value!r}")
    return Point(x, y)


def _parse_int(data: dict, key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise LayoutError(f"Invalid layout: '{key}' must be an integer, got {value!r}")
    return value


def _parse_grid(data: Any, rows: int, cols: int) -> GridConfig:
    if not isinstance(data, dict):
        raise LayoutError("Invalid layout: 'grid' must be a mapping")
    if {"origin", "u", "v"} <= data.keys():
        return GridConfig(
            origin=_parse_point(data["origin"], "grid.origin"),
            u=_parse_point(data["u"], "grid.u"),
            v=_parse_point(data["v"], "grid.v"),
        )
    if {"top_left", "top_right", "bottom_left"} <= data.keys():
        try:
            return grid_from_corners(
                _parse_point(data["top_left"], "grid.top_left"),
                _parse_point(data["top_right"], "grid.top_right"),
                _parse_point(data["bottom_left"], "grid.bottom_left"),
                rows,
                cols,
            )
        except ValueError as e:
            raise LayoutError(f"Invalid layout: {e}") from e
    raise LayoutError(
        "Invalid layout: 'grid' needs either origin/u/v or "
        "top_left/top_right/bottom_left"
    )


def layout_to_yaml(layout: PlateLayout, path: Path) -> None:
    """Write a layout to YAML using the explicit origin/u/v grid form."""
    data: dict[str, Any] = {
        "rows": layout.rows,
        "cols": layout.cols,
        "grid": {
            "origin": _point_to_list(layout.grid.origin),
            "u": _point_to_list(layout.grid.u),
            "v": _point_to_list(layout.grid.v),
        },
        "references": {
            "low": _point_to_list(layout.ref_low),
            "high": _point_to_list(layout.ref_high),
        },
        "concentrations": list(layout.concentrations),
        "units": layout.units,
    }
    if layout.radius_factor != WELL_RADIUS_FACTOR:
        data["radius_factor"] = layout.radius_factor

    with open(path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=None, sort_keys=False)


def layout_from_yaml(path: Path) -> PlateLayout:
    """Read a layout from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        LayoutError: If the YAML is invalid or missing required fields.
    """
    path = Path(path)
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise LayoutError(f"Invalid layout YAML: {e}") from e

    if not isinstance(data, dict):
        raise LayoutError(f"Invalid layout YAML: expected a mapping, got {type(data).__name__}")

    for key in ("rows", "cols", "grid", "references"):
        if key not in data:
            raise LayoutError(f"Invalid layout YAML: missing required key '{key}'")

    rows = _parse_int(data, "rows")
    cols = _parse_int(data, "cols")

    refs = data["references"]
    if not isinstance(refs, dict) or "low" not in refs or "high" not in refs:
        raise LayoutError("Invalid layout YAML: 'references' needs 'low' and 'high'")

    concentrations = data.get("concentrations") or []
    if not isinstance(concentrations, list):
        raise LayoutError("Invalid layout YAML: 'concentrations' must be a list")
    try:
        concentrations = tuple(float(c) for c in concentrations)
    except (TypeError, ValueError):
        raise LayoutError("Invalid layout YAML: 'concentrations' must be numbers") from None

    try:
        radius_factor = float(data.get("radius_factor", WELL_RADIUS_FACTOR))
    except (TypeError, ValueError):
        raise LayoutError("Invalid layout YAML: 'radius_factor' must be a number") from None

    return PlateLayout(
        rows=rows,
        cols=cols,
        grid=_parse_grid(data["grid"], rows, cols),
        ref_low=_parse_point(refs["low"], "references.low"),
        ref_high=_parse_point(refs["high"], "references.high"),
        concentrations=concentrations,
        units=str(data.get("units", DEFAULT_UNITS)),
        radius_factor=radius_factor,
    )


def template_layout(rows: int, cols: int, units: str = DEFAULT_UNITS, pitch: float = 100.0) -> PlateLayout:
    """A placeholder layout with a square grid and no doses, for editing by hand."""
    origin = Point(pitch / 2, pitch / 2)
    return PlateLayout(
        rows=rows,
        cols=cols,
        grid=GridConfig(origin=origin, u=Point(pitch, 0.0), v=Point(0.0, pitch)),
        ref_low=origin,
        ref_high=Point(origin.x, origin.y + pitch * (rows - 1)),
        concentrations=(0.0,) * rows,
        units=units,
    )
