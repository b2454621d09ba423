"""Circular pixel sampling over a decoded plate image."""

from __future__ import annotations

import math

import numpy as np

from viaplate.core.models import Point


def validate_image(image: np.ndarray) -> np.ndarray:
    """Check that ``image`` is an (H, W, 3) uint8 RGB array.

    Returns:
        The image as a numpy array (no copy when already an ndarray).

    Raises:
        ValueError: If the array is not 8-bit or lacks three color channels.
    """
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) RGB image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got dtype {image.dtype}")
    return image


def disk_mask_bounds(
    shape: tuple[int, ...], center: Point, radius: float,
) -> tuple[np.ndarray, int, int] | None:
    """Disk mask clipped to the image, with the mask's top-left offset.

    Returns None when no pixel of the bounding square lies in the image.
    """
    r = max(1, int(math.floor(radius)))
    height, width = shape[:2]

    x0 = max(0, math.ceil(center.x - r))
    x1 = min(width - 1, math.floor(center.x + r))
    y0 = max(0, math.ceil(center.y - r))
    y1 = min(height - 1, math.floor(center.y + r))
    if x0 > x1 or y0 > y1:
        return None

    ys, xs = np.mgrid[y0 : y1 + 1, x0 : x1 + 1]
    mask = (xs - center.x) ** 2 + (ys - center.y) ** 2 <= r * r
    return mask, y0, x0


def sample_disk(image: np.ndarray, center: Point, radius: float) -> np.ndarray:
    """Return every pixel whose distance from ``center`` is at most ``radius``.

    The radius is floored to an integer of at least 1. Pixels outside the
    image are simply not sampled, so a disk partly or fully outside the
    image yields fewer samples, possibly none.

    Args:
        image: (H, W, 3) RGB array.
        center: Disk center in pixel coordinates (x = column, y = row).
        radius: Disk radius in pixels.

    Returns:
        (N, 3) uint8 array of sampled colors, N >= 0.
    """
    image = validate_image(image)
    bounds = disk_mask_bounds(image.shape, center, radius)
    if bounds is None:
        return np.empty((0, 3), dtype=np.uint8)

    mask, y0, x0 = bounds
    h, w = mask.shape
    crop = image[y0 : y0 + h, x0 : x0 + w]
    return np.ascontiguousarray(crop[mask], dtype=np.uint8)
