"""sRGB <-> CIE L*a*b* conversion (D65, 2 degree observer).

Both directions work on numpy arrays whose last axis holds the three
channels, so whole pixel samples convert in one call. The scalar
``rgb_to_lab``/``lab_to_rgb`` wrappers run the same code path, which keeps
per-well and per-sample results bit-identical.
"""

from __future__ import annotations

import numpy as np

from viaplate.core.models import RGB

# sRGB companding
_SRGB_THRESHOLD = 0.04045
_SRGB_LINEAR_SLOPE = 12.92
_SRGB_OFFSET = 0.055
_SRGB_SCALE = 1.055
_SRGB_GAMMA = 2.4
_LINEAR_THRESHOLD = _SRGB_THRESHOLD / _SRGB_LINEAR_SLOPE

# Linear sRGB -> XYZ, D65
RGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
])
XYZ_TO_RGB = np.linalg.inv(RGB_TO_XYZ)

D65_WHITE = np.array([0.95047, 1.00000, 1.08883])

# CIE f(t)
_EPSILON = 0.008856
_KAPPA_SLOPE = 7.787
_KAPPA_OFFSET = 16.0 / 116.0
# Largest value the linear branch of f can produce; the cube-root branch
# starts strictly above it.
_F_LINEAR_MAX = _KAPPA_SLOPE * _EPSILON + _KAPPA_OFFSET


def _srgb_to_linear(c: np.ndarray) -> np.ndarray:
    return np.where(
        c > _SRGB_THRESHOLD,
        ((np.maximum(c, _SRGB_THRESHOLD) + _SRGB_OFFSET) / _SRGB_SCALE) ** _SRGB_GAMMA,
        c / _SRGB_LINEAR_SLOPE,
    )


def _linear_to_srgb(c: np.ndarray) -> np.ndarray:
    return np.where(
        c > _LINEAR_THRESHOLD,
        _SRGB_SCALE * np.maximum(c, _LINEAR_THRESHOLD) ** (1.0 / _SRGB_GAMMA) - _SRGB_OFFSET,
        c * _SRGB_LINEAR_SLOPE,
    )


def _f(t: np.ndarray) -> np.ndarray:
    return np.where(t > _EPSILON, np.cbrt(t), _KAPPA_SLOPE * t + _KAPPA_OFFSET)


def _f_inv(t: np.ndarray) -> np.ndarray:
    return np.where(t > _F_LINEAR_MAX, t ** 3, (t - _KAPPA_OFFSET) / _KAPPA_SLOPE)


def rgb_array_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert 8-bit sRGB values to L*a*b*.

    Args:
        rgb: Array of shape (..., 3) with channel values in [0, 255].

    Returns:
        Float64 array of the same shape holding (L*, a*, b*).
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    if rgb.shape[-1:] != (3,):
        raise ValueError(f"Expected trailing axis of length 3, got shape {rgb.shape}")

    linear = _srgb_to_linear(rgb / 255.0)
    xyz = linear @ RGB_TO_XYZ.T
    fx, fy, fz = np.moveaxis(_f(xyz / D65_WHITE), -1, 0)

    lab = np.empty_like(linear)
    lab[..., 0] = 116.0 * fy - 16.0
    lab[..., 1] = 500.0 * (fx - fy)
    lab[..., 2] = 200.0 * (fy - fz)
    return lab


def lab_array_to_rgb(lab: np.ndarray) -> np.ndarray:
    """Convert L*a*b* values back to 8-bit sRGB.

    Applies the inverse of each stage of :func:`rgb_array_to_lab` in
    reverse order, then rounds half up and clamps to [0, 255].

    Args:
        lab: Array of shape (..., 3).

    Returns:
        uint8 array of the same shape.
    """
    lab = np.asarray(lab, dtype=np.float64)
    if lab.shape[-1:] != (3,):
        raise ValueError(f"Expected trailing axis of length 3, got shape {lab.shape}")

    fy = (lab[..., 0] + 16.0) / 116.0
    fx = lab[..., 1] / 500.0 + fy
    fz = fy - lab[..., 2] / 200.0

    xyz = _f_inv(np.stack([fx, fy, fz], axis=-1)) * D65_WHITE
    srgb = _linear_to_srgb(xyz @ XYZ_TO_RGB.T)

    scaled = np.floor(srgb * 255.0 + 0.5)
    return np.clip(np.nan_to_num(scaled, nan=0.0), 0, 255).astype(np.uint8)


def rgb_to_lab(color: RGB) -> tuple[float, float, float]:
    """Convert a single RGB color to an (L*, a*, b*) tuple."""
    lab = rgb_array_to_lab(np.array(color.as_tuple()))
    return (float(lab[0]), float(lab[1]), float(lab[2]))


def lab_to_rgb(lab: tuple[float, float, float]) -> RGB:
    """Convert a single (L*, a*, b*) triple to the nearest RGB color."""
    return RGB.from_array(lab_array_to_rgb(np.array(lab, dtype=np.float64)))
