"""Exception classes for the viaplate core module."""

from __future__ import annotations


class PlateAnalysisError(Exception):
    """Base exception for all plate analysis errors."""


class InvalidRadiusError(PlateAnalysisError):
    """Raised when the well sampling radius is zero or non-finite."""

    def __init__(self, radius: float | None = None) -> None:
        if radius is None:
            msg = "Could not determine a valid well radius"
        else:
            msg = f"Could not determine a valid well radius (got {radius!r})"
        super().__init__(msg + ". Check grid selection and dimensions.")
        self.radius = radius


class EmptyReferenceSampleError(PlateAnalysisError):
    """Raised when a calibration point yields no in-bounds pixels."""

    def __init__(self, which: str | None = None, point: object | None = None) -> None:
        if which and point is not None:
            msg = f"Could not sample the {which} reference color at {point}"
        elif which:
            msg = f"Could not sample the {which} reference color"
        else:
            msg = "Could not sample reference colors"
        super().__init__(msg + ". Calibration points must lie inside a well.")
        self.which = which
        self.point = point


class ImageLoadError(PlateAnalysisError):
    """Raised when a plate image cannot be read or decoded."""

    def __init__(self, path: str | None = None, reason: str | None = None) -> None:
        msg = f"Could not load image: {path}" if path else "Could not load image"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)
        self.path = path
        self.reason = reason


class LayoutError(PlateAnalysisError):
    """Raised when a plate layout file is missing fields or malformed."""
