"""CSV export of plate analysis results."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Sequence

import pandas as pd

from viaplate.core.models import AnalysisResult
from viaplate.plate.grid import row_label

NOT_CALCULATED = "Not calculated"


def results_to_dataframe(result: AnalysisResult) -> pd.DataFrame:
    """One row per well, in row-major order."""
    records = [
        {
            "well": w.id,
            "row": w.row,
            "col": w.col,
            "center_x": w.center.x,
            "center_y": w.center.y,
            "r": w.avg_color.r,
            "g": w.avg_color.g,
            "b": w.avg_color.b,
            "pixel_count": w.pixel_count,
            "status": w.status,
            "intensity": w.intensity,
            "viability": w.viability,
        }
        for w in result.wells
    ]
    return pd.DataFrame.from_records(
        records,
        columns=[
            "well", "row", "col", "center_x", "center_y", "r", "g", "b",
            "pixel_count", "status", "intensity", "viability",
        ],
    )


def row_headers(
    rows: int, row_concentrations: Sequence[float], units: str,
) -> list[str]:
    """Row letters, annotated with the dose for dosed rows (e.g. "B (10 nM)")."""
    headers = []
    for row in range(rows):
        label = row_label(row)
        conc = row_concentrations[row] if row < len(row_concentrations) else 0
        if conc > 0:
            label = f"{label} ({conc:g} {units})"
        headers.append(label)
    return headers


def viability_table(
    result: AnalysisResult, row_concentrations: Sequence[float], units: str,
) -> pd.DataFrame:
    """Viability grid with annotated row headers and 1-based column headers."""
    grid = result.viability_grid()
    return pd.DataFrame(
        grid,
        index=pd.Index(row_headers(grid.shape[0], row_concentrations, units), name="Row"),
        columns=[str(c + 1) for c in range(grid.shape[1])],
    )


def format_ic50(result: AnalysisResult) -> str:
    if result.ic50 is None:
        return NOT_CALCULATED
    return f"{result.ic50.value:.5g} {result.ic50.units}"


def export_summary_csv(
    result: AnalysisResult,
    path: Path,
    row_concentrations: Sequence[float],
    units: str,
) -> None:
    """Write the IC50 line followed by the per-well viability grid."""
    table = viability_table(result, row_concentrations, units)
    with open(path, "w", newline="") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(["IC50", format_ic50(result)])
        writer.writerow([])
        writer.writerow(["Well Viability (%)"])
        table.to_csv(f, float_format="%.2f", lineterminator="\n")


def export_wells_csv(result: AnalysisResult, path: Path) -> None:
    """Write one line per well with color, status and viability."""
    results_to_dataframe(result).to_csv(path, index=False)
