"""Outlier-resistant representative color of a pixel sample."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from viaplate.core.models import RGB
from viaplate.measure.colorspace import lab_array_to_rgb, rgb_array_to_lab

BLACK = RGB(0, 0, 0)


def _as_pixel_array(pixels: np.ndarray | Sequence[RGB]) -> np.ndarray:
    if isinstance(pixels, np.ndarray):
        arr = pixels
    else:
        arr = np.array([p.as_tuple() for p in pixels], dtype=np.uint8).reshape(-1, 3)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"Expected (N, 3) pixel array, got shape {arr.shape}")
    return arr


def median_lab(pixels: np.ndarray | Sequence[RGB]) -> np.ndarray | None:
    """Per-channel median of the pixels in L*a*b*.

    Each of L*, a* and b* is reduced independently (marginal median), with
    even counts averaging the two central order statistics.

    Returns:
        Length-3 float array, or None for an empty sample.
    """
    arr = _as_pixel_array(pixels)
    if len(arr) == 0:
        return None
    return np.median(rgb_array_to_lab(arr), axis=0)


def robust_color(pixels: np.ndarray | Sequence[RGB]) -> RGB:
    """Representative color of a pixel sample, resistant to glare and shadow.

    Empty input yields black. This is a sentinel, not a measurement:
    callers must check the sample size themselves to tell "no data" apart
    from a genuinely black well. A single pixel is returned unchanged.

    Args:
        pixels: (N, 3) uint8 array or a sequence of RGB colors.

    Returns:
        The median color in L*a*b*, converted back to RGB.
    """
    arr = _as_pixel_array(pixels)
    if len(arr) == 0:
        return BLACK
    if len(arr) == 1:
        return RGB.from_array(arr[0])
    return RGB.from_array(lab_array_to_rgb(median_lab(arr)))
