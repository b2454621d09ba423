"""viaplate IO: image decoding, plate layout files and CSV export."""

from viaplate.io.export import (
    export_summary_csv,
    export_wells_csv,
    results_to_dataframe,
    viability_table,
)
from viaplate.io.image import load_image, to_rgb8
from viaplate.io.layout import PlateLayout, layout_from_yaml, layout_to_yaml, template_layout

__all__ = [
    "PlateLayout",
    "export_summary_csv",
    "export_wells_csv",
    "layout_from_yaml",
    "layout_to_yaml",
    "load_image",
    "results_to_dataframe",
    "template_layout",
    "to_rgb8",
    "viability_table",
]
