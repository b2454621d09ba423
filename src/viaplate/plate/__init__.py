"""viaplate Plate: grid geometry, plate analysis and IC50 estimation."""

from viaplate.plate.analyzer import PlateAnalyzer, analyze_plate
from viaplate.plate.dose_response import (
    INSUFFICIENT_DOSE_DATA,
    NO_VIABILITY_CROSSING,
    UNSTABLE_INTERPOLATION,
    dose_response_points,
    estimate_ic50,
    fit_ic50,
)
from viaplate.plate.grid import (
    WELL_RADIUS_FACTOR,
    grid_from_corners,
    well_centers,
    well_label,
    well_radius,
)

__all__ = [
    "PlateAnalyzer",
    "analyze_plate",
    "dose_response_points",
    "estimate_ic50",
    "fit_ic50",
    "INSUFFICIENT_DOSE_DATA",
    "NO_VIABILITY_CROSSING",
    "UNSTABLE_INTERPOLATION",
    "WELL_RADIUS_FACTOR",
    "grid_from_corners",
    "well_centers",
    "well_label",
    "well_radius",
]
