"""Two-point viability calibration along a L*a*b* axis."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from viaplate.core.models import RGB
from viaplate.measure.colorspace import rgb_array_to_lab

# Squared L*a*b* distance below which two references count as identical.
CALIBRATION_EPSILON = 1e-6


@dataclass(frozen=True)
class CalibrationAxis:
    """Axis from the 0% viability reference to the 100% reference.

    Attributes:
        low: Reference color for 0% viability.
        high: Reference color for 100% viability.
        origin: ``low`` in L*a*b*.
        gradient: ``high - low`` in L*a*b*.
        magnitude_sq: Squared length of ``gradient``.
    """

    low: RGB
    high: RGB
    origin: tuple[float, float, float]
    gradient: tuple[float, float, float]
    magnitude_sq: float
    epsilon: float = CALIBRATION_EPSILON

    @property
    def is_degenerate(self) -> bool:
        return self.magnitude_sq < self.epsilon

    def project(self, color: RGB) -> float:
        """Scalar projection of ``color`` onto the axis, clamped to [0, 1].

        Returns 0.0 for a degenerate axis.
        """
        return project(color, self)


def build_axis(ref_low: RGB, ref_high: RGB, epsilon: float = CALIBRATION_EPSILON) -> CalibrationAxis:
    """Build the calibration axis between two reference colors."""
    lab = rgb_array_to_lab(np.array([ref_low.as_tuple(), ref_high.as_tuple()]))
    gradient = lab[1] - lab[0]
    return CalibrationAxis(
        low=ref_low,
        high=ref_high,
        origin=tuple(float(c) for c in lab[0]),
        gradient=tuple(float(c) for c in gradient),
        magnitude_sq=float(np.dot(gradient, gradient)),
        epsilon=epsilon,
    )


def project(color: RGB, axis: CalibrationAxis) -> float:
    """Project ``color`` onto ``axis`` and clamp the result to [0, 1]."""
    if axis.is_degenerate:
        return 0.0
    offset = rgb_array_to_lab(np.array(color.as_tuple())) - np.asarray(axis.origin)
    intensity = float(np.dot(offset, axis.gradient)) / axis.magnitude_sq
    return min(1.0, max(0.0, intensity))
