"""Shared fixtures for IO module tests."""

from __future__ import annotations

import pytest

from viaplate.core.models import RGB, AnalysisResult, IC50Result, Point, WellResult


@pytest.fixture
def small_result() -> AnalysisResult:
    """A 2x3 result with known viabilities and one unmeasured well."""
    viabilities = [[100.0, 87.5, 75.25], [12.3456, 0.0, 0.0]]
    wells = []
    for row, values in enumerate(viabilities):
        for col, v in enumerate(values):
            unmeasured = (row, col) == (1, 2)
            wells.append(WellResult(
                id=f"{'AB'[row]}{col + 1}",
                row=row,
                col=col,
                center=Point(10.0 + 20 * col, 10.0 + 20 * row),
                avg_color=RGB(0, 0, 0) if unmeasured else RGB(120, 40, 200),
                intensity=v / 100,
                viability=v,
                pixel_count=0 if unmeasured else 29,
                status="unmeasured" if unmeasured else "measured",
            ))
    return AnalysisResult(
        wells=tuple(wells),
        ic50=IC50Result(value=12.3456789, units="nM"),
        radius=3.0,
        reference_low=RGB(250, 220, 60),
        reference_high=RGB(80, 20, 120),
    )
