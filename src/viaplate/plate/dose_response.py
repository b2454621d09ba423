"""Dose-response aggregation and IC50 estimation by linear interpolation.

Rows of the plate form the dose series: every row with a positive
concentration contributes the mean viability of its wells. The IC50 is
interpolated linearly between the first pair of adjacent doses (in
ascending concentration) whose viabilities straddle 50%. No curve model is
fitted.

Missing or ambiguous dose data never raises: the estimate is simply absent
and the reason is reported as one of the module-level failure constants.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from viaplate.core.models import WELL_UNMEASURED, DosePoint, IC50Result, WellResult

logger = logging.getLogger(__name__)

INSUFFICIENT_DOSE_DATA = "insufficient_dose_data"
NO_VIABILITY_CROSSING = "no_viability_crossing"
UNSTABLE_INTERPOLATION = "unstable_interpolation"

FAILURE_MESSAGES = {
    INSUFFICIENT_DOSE_DATA: "fewer than two dosed rows with wells",
    NO_VIABILITY_CROSSING: "viability never crosses 50%",
    UNSTABLE_INTERPOLATION: "bracketing doses have near-identical viability",
}

HALF_MAXIMAL = 50.0
INTERPOLATION_EPSILON = 1e-6


def dose_response_points(
    wells: Sequence[WellResult],
    row_concentrations: Sequence[float],
    row_count: int,
    exclude_unmeasured: bool = False,
) -> list[DosePoint]:
    """Mean viability per dosed row, sorted by ascending concentration.

    Rows with a non-positive concentration (vehicle or blank rows) and rows
    without wells are left out. Every well of a row counts toward its mean,
    including unmeasured ones (viability 0), unless ``exclude_unmeasured``
    is set.
    """
    by_row: list[list[float]] = [[] for _ in range(row_count)]
    for well in wells:
        if not 0 <= well.row < row_count:
            continue
        if exclude_unmeasured and well.status == WELL_UNMEASURED:
            continue
        by_row[well.row].append(well.viability)

    points = []
    for row, concentration in enumerate(row_concentrations[:row_count]):
        viabilities = by_row[row]
        if concentration <= 0 or not viabilities:
            continue
        points.append(DosePoint(
            concentration=float(concentration),
            viability=sum(viabilities) / len(viabilities),
        ))

    points.sort(key=lambda p: p.concentration)
    return points


def _crosses_half(a: DosePoint, b: DosePoint) -> bool:
    return (a.viability >= HALF_MAXIMAL) != (b.viability >= HALF_MAXIMAL)


def fit_ic50(
    points: Sequence[DosePoint], units: str,
) -> tuple[IC50Result | None, str | None]:
    """Interpolate the IC50 from a dose series.

    Args:
        points: Dose points; sorted by concentration here, so any order works.
        units: Concentration unit label, passed through unchanged.

    Returns:
        ``(result, None)`` on success, ``(None, failure)`` otherwise, where
        ``failure`` is one of the module-level failure constants.
    """
    ordered = sorted(points, key=lambda p: p.concentration)
    if len(ordered) < 2:
        return None, INSUFFICIENT_DOSE_DATA

    bracket = next(
        ((a, b) for a, b in zip(ordered, ordered[1:]) if _crosses_half(a, b)),
        None,
    )
    if bracket is None:
        return None, NO_VIABILITY_CROSSING

    # Always interpolate from the lower-viability point upward.
    p1, p2 = sorted(bracket, key=lambda p: p.viability)
    dv = p2.viability - p1.viability
    if abs(dv) < INTERPOLATION_EPSILON:
        return None, UNSTABLE_INTERPOLATION

    value = p1.concentration + (HALF_MAXIMAL - p1.viability) * (
        p2.concentration - p1.concentration
    ) / dv
    if not math.isfinite(value):
        return None, UNSTABLE_INTERPOLATION

    return IC50Result(value=value, units=units), None


def estimate_ic50_with_reason(
    wells: Sequence[WellResult],
    row_concentrations: Sequence[float],
    row_count: int,
    units: str,
    exclude_unmeasured: bool = False,
) -> tuple[IC50Result | None, str | None, list[DosePoint]]:
    """Like :func:`estimate_ic50`, also returning the failure and dose series."""
    if sum(1 for c in row_concentrations if c > 0) < 2:
        logger.info("IC50 not determined: fewer than two positive concentrations")
        return None, INSUFFICIENT_DOSE_DATA, []

    points = dose_response_points(
        wells, row_concentrations, row_count, exclude_unmeasured=exclude_unmeasured,
    )
    result, failure = fit_ic50(points, units)
    if result is None:
        logger.info("IC50 not determined: %s", FAILURE_MESSAGES[failure])
    else:
        logger.info("IC50 = %.5g %s (from %d dose points)", result.value, units, len(points))
    return result, failure, points


def estimate_ic50(
    wells: Sequence[WellResult],
    row_concentrations: Sequence[float],
    row_count: int,
    units: str,
    exclude_unmeasured: bool = False,
) -> IC50Result | None:
    """Estimate the IC50 of a plate from its per-well viabilities.

    Args:
        wells: Per-well results (any order).
        row_concentrations: One concentration per row; ``<= 0`` means undosed.
        row_count: Number of plate rows.
        units: Concentration unit label.
        exclude_unmeasured: Leave wells that sampled no pixels out of their
            row mean instead of counting them as 0% viability.

    Returns:
        The IC50, or None when it cannot be determined.
    """
    result, _, _ = estimate_ic50_with_reason(
        wells, row_concentrations, row_count, units,
        exclude_unmeasured=exclude_unmeasured,
    )
    return result
