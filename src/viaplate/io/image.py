"""Plate image decoding to 8-bit RGB arrays.

TIFF files are read with tifffile; everything else (PNG, JPEG, BMP, ...)
goes through scikit-image.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import tifffile
from skimage import io as skio
from skimage.color import gray2rgb
from skimage.util import img_as_ubyte

from viaplate.core.exceptions import ImageLoadError

logger = logging.getLogger(__name__)

TIFF_SUFFIXES = frozenset({".tif", ".tiff"})


def to_rgb8(data: np.ndarray) -> np.ndarray:
    """Normalize decoded pixel data to an (H, W, 3) uint8 array.

    Grayscale is replicated across channels, an alpha channel is dropped
    and other dtypes are rescaled to 8 bits.

    Raises:
        ValueError: If the array cannot be interpreted as a 2D image.
    """
    data = np.asarray(data)
    if data.ndim == 2:
        data = gray2rgb(data)
    elif data.ndim == 3 and data.shape[2] == 4:
        data = data[..., :3]
    elif data.ndim == 3 and data.shape[2] == 1:
        data = gray2rgb(data[..., 0])

    if data.ndim != 3 or data.shape[2] != 3:
        raise ValueError(f"Unsupported image shape {data.shape}")

    if data.dtype != np.uint8:
        if np.issubdtype(data.dtype, np.floating):
            data = np.clip(data, 0.0, 1.0)
        data = img_as_ubyte(data)
    return np.ascontiguousarray(data)


def load_image(path: Path | str) -> np.ndarray:
    """Read a plate photograph as an (H, W, 3) uint8 RGB array.

    Args:
        path: Image file path.

    Returns:
        Decoded RGB image.

    Raises:
        ImageLoadError: If the file is missing or cannot be decoded.
    """
    path = Path(path)
    if not path.is_file():
        raise ImageLoadError(str(path), "file not found")

    try:
        if path.suffix.lower() in TIFF_SUFFIXES:
            data = tifffile.imread(str(path))
        else:
            data = skio.imread(str(path))
        image = to_rgb8(data)
    except (OSError, ValueError) as e:
        raise ImageLoadError(str(path), str(e)) from e

    logger.info("Loaded %s (%dx%d)", path.name, image.shape[1], image.shape[0])
    return image
