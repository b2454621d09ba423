"""viaplate Core: data models and exceptions."""

from viaplate.core.exceptions import (
    EmptyReferenceSampleError,
    ImageLoadError,
    InvalidRadiusError,
    LayoutError,
    PlateAnalysisError,
)
from viaplate.core.models import (
    RGB,
    AnalysisResult,
    DosePoint,
    GridConfig,
    IC50Result,
    Point,
    WellResult,
)

__all__ = [
    "AnalysisResult",
    "DosePoint",
    "GridConfig",
    "IC50Result",
    "Point",
    "RGB",
    "WellResult",
    "PlateAnalysisError",
    "InvalidRadiusError",
    "EmptyReferenceSampleError",
    "ImageLoadError",
    "LayoutError",
]
