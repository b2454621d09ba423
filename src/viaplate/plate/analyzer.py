"""PlateAnalyzer: calibrated viability for every well of a plate image."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence

import numpy as np

from viaplate.core.exceptions import EmptyReferenceSampleError
from viaplate.core.models import (
    WELL_MEASURED,
    WELL_UNCALIBRATED,
    WELL_UNMEASURED,
    RGB,
    AnalysisResult,
    GridConfig,
    Point,
    WellResult,
)
from viaplate.measure.calibration import CALIBRATION_EPSILON, CalibrationAxis, build_axis
from viaplate.measure.robust import robust_color
from viaplate.measure.sampler import sample_disk, validate_image
from viaplate.plate.dose_response import estimate_ic50_with_reason
from viaplate.plate.grid import WELL_RADIUS_FACTOR, well_centers, well_label, well_radius

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class PlateAnalyzer:
    """Measure viability across a well grid and estimate the IC50.

    Each analysis samples both calibration references first, then every
    well independently against the same read-only calibration axis. Wells
    may be processed on a thread pool; results always come back row-major.

    Args:
        radius_factor: Sampling radius as a fraction of the well pitch.
        calibration_epsilon: Squared L*a*b* distance below which the two
            references are treated as indistinguishable.
        max_workers: Threads for per-well processing. None or 1 runs serially.
        exclude_unmeasured: Leave wells outside the image out of the dose
            row means. By default they count as 0% viability.
    """

    def __init__(
        self,
        radius_factor: float = WELL_RADIUS_FACTOR,
        calibration_epsilon: float = CALIBRATION_EPSILON,
        max_workers: int | None = None,
        exclude_unmeasured: bool = False,
    ) -> None:
        self._radius_factor = radius_factor
        self._calibration_epsilon = calibration_epsilon
        self._max_workers = max_workers
        self._exclude_unmeasured = exclude_unmeasured

    @property
    def radius_factor(self) -> float:
        return self._radius_factor

    def analyze(
        self,
        image: np.ndarray,
        grid: GridConfig,
        rows: int,
        cols: int,
        ref_low: Point,
        ref_high: Point,
        row_concentrations: Sequence[float],
        units: str,
        progress_callback: ProgressCallback | None = None,
    ) -> AnalysisResult:
        """Analyze one plate image.

        Args:
            image: Decoded (H, W, 3) uint8 RGB image.
            grid: Affine well grid.
            rows: Number of well rows.
            cols: Number of well columns.
            ref_low: Point inside the 0% viability reference well.
            ref_high: Point inside the 100% viability reference well.
            row_concentrations: Dose per row; ``<= 0`` marks an undosed row.
            units: Concentration unit label, passed through to the IC50.
            progress_callback: Optional callback(current, total, well_id).

        Returns:
            AnalysisResult with row-major wells and the IC50 estimate.

        Raises:
            ValueError: If rows/cols are not positive or the image is malformed.
            InvalidRadiusError: If the grid yields no usable sampling radius.
            EmptyReferenceSampleError: If a reference point samples no pixels.
        """
        start = time.monotonic()
        if rows < 1 or cols < 1:
            raise ValueError(f"Plate must have at least one row and column, got {rows}x{cols}")
        image = validate_image(image)

        radius = well_radius(grid, self._radius_factor)
        axis = self._calibrate(image, ref_low, ref_high, radius)

        targets = well_centers(grid, rows, cols)
        total = len(targets)

        def measure(target: tuple[int, int, Point]) -> WellResult:
            row, col, center = target
            return _measure_well(image, row, col, center, radius, axis)

        wells: list[WellResult] = []
        if self._max_workers and self._max_workers > 1:
            logger.debug("Measuring %d wells with %d workers", total, self._max_workers)
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                for i, well in enumerate(executor.map(measure, targets), start=1):
                    wells.append(well)
                    if progress_callback is not None:
                        progress_callback(i, total, well.id)
        else:
            for i, target in enumerate(targets, start=1):
                well = measure(target)
                wells.append(well)
                if progress_callback is not None:
                    progress_callback(i, total, well.id)

        wells.sort(key=lambda w: (w.row, w.col))

        unmeasured = [w.id for w in wells if w.status == WELL_UNMEASURED]
        if unmeasured:
            logger.warning(
                "%d well(s) fall outside the image and were not measured: %s",
                len(unmeasured), ", ".join(unmeasured),
            )

        ic50, failure, points = estimate_ic50_with_reason(
            wells, row_concentrations, rows, units,
            exclude_unmeasured=self._exclude_unmeasured,
        )

        logger.info(
            "Analyzed %d wells (radius %.1f px) in %.2fs",
            total, radius, time.monotonic() - start,
        )
        return AnalysisResult(
            wells=tuple(wells),
            ic50=ic50,
            radius=radius,
            reference_low=axis.low,
            reference_high=axis.high,
            calibration_degenerate=axis.is_degenerate,
            ic50_failure=failure,
            dose_points=tuple(points),
        )

    def _calibrate(
        self, image: np.ndarray, ref_low: Point, ref_high: Point, radius: float,
    ) -> CalibrationAxis:
        low_pixels = sample_disk(image, ref_low, radius)
        if len(low_pixels) == 0:
            raise EmptyReferenceSampleError("low", ref_low)
        high_pixels = sample_disk(image, ref_high, radius)
        if len(high_pixels) == 0:
            raise EmptyReferenceSampleError("high", ref_high)

        axis = build_axis(
            robust_color(low_pixels),
            robust_color(high_pixels),
            epsilon=self._calibration_epsilon,
        )
        logger.info(
            "Calibration references: low=%s high=%s",
            axis.low.as_tuple(), axis.high.as_tuple(),
        )
        if axis.is_degenerate:
            logger.warning(
                "Reference colors are indistinguishable (|gradient|^2=%.3g); "
                "all wells will report 0%% viability",
                axis.magnitude_sq,
            )
        return axis


def _measure_well(
    image: np.ndarray,
    row: int,
    col: int,
    center: Point,
    radius: float,
    axis: CalibrationAxis,
) -> WellResult:
    pixels = sample_disk(image, center, radius)
    color = robust_color(pixels)

    if len(pixels) == 0:
        intensity, status = 0.0, WELL_UNMEASURED
    elif axis.is_degenerate:
        intensity, status = 0.0, WELL_UNCALIBRATED
    else:
        intensity, status = axis.project(color), WELL_MEASURED

    return WellResult(
        id=well_label(row, col),
        row=row,
        col=col,
        center=center,
        avg_color=color,
        intensity=intensity,
        viability=intensity * 100.0,
        pixel_count=len(pixels),
        status=status,
    )


def analyze_plate(
    image: np.ndarray,
    grid: GridConfig,
    rows: int,
    cols: int,
    ref_low: Point,
    ref_high: Point,
    row_concentrations: Sequence[float],
    units: str,
) -> AnalysisResult:
    """Analyze a plate with default settings. See :meth:`PlateAnalyzer.analyze`."""
    return PlateAnalyzer().analyze(
        image, grid, rows, cols, ref_low, ref_high, row_concentrations, units,
    )
