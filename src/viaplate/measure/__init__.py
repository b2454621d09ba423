"""viaplate Measure: color conversion, sampling and calibration."""

from viaplate.measure.calibration import CalibrationAxis, build_axis, project
from viaplate.measure.colorspace import (
    lab_array_to_rgb,
    lab_to_rgb,
    rgb_array_to_lab,
    rgb_to_lab,
)
from viaplate.measure.robust import median_lab, robust_color
from viaplate.measure.sampler import sample_disk

__all__ = [
    "CalibrationAxis",
    "build_axis",
    "project",
    "rgb_to_lab",
    "lab_to_rgb",
    "rgb_array_to_lab",
    "lab_array_to_rgb",
    "median_lab",
    "robust_color",
    "sample_disk",
]
