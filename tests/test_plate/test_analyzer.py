"""Tests for PlateAnalyzer end-to-end on synthetic plate images."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from viaplate.core.exceptions import EmptyReferenceSampleError, InvalidRadiusError
from viaplate.core.models import RGB, GridConfig, Point
from viaplate.plate.analyzer import PlateAnalyzer, analyze_plate
from viaplate.plate.dose_response import INSUFFICIENT_DOSE_DATA


@pytest.fixture
def refs(plate_grid):
    """(low, high) reference points: D4 holds the 0% color, A1 the 100% color."""
    return plate_grid.center(3, 3), plate_grid.center(0, 0)


class TestAnalyze:
    def test_ic50_from_plate(self, dose_plate, plate_grid, refs, dose_concentrations):
        low, high = refs
        result = analyze_plate(
            dose_plate, plate_grid, 4, 4, low, high, dose_concentrations, "nM",
        )
        assert result.ic50 is not None
        assert result.ic50.value == pytest.approx(55.0)
        assert result.ic50.units == "nM"
        assert result.ic50_failure is None
        assert [p.concentration for p in result.dose_points] == [1.0, 10.0, 100.0]

    def test_reference_colors(self, dose_plate, plate_grid, refs, dose_concentrations,
                              low_color, high_color):
        low, high = refs
        result = analyze_plate(
            dose_plate, plate_grid, 4, 4, low, high, dose_concentrations, "nM",
        )
        assert result.reference_low == RGB(*low_color)
        assert result.reference_high == RGB(*high_color)
        assert not result.calibration_degenerate

    def test_well_viabilities(self, dose_plate, plate_grid, refs, dose_concentrations,
                              high_color):
        low, high = refs
        result = analyze_plate(
            dose_plate, plate_grid, 4, 4, low, high, dose_concentrations, "nM",
        )
        a1 = result.well("A1")
        assert a1.viability == pytest.approx(100.0)
        assert a1.intensity == pytest.approx(1.0)
        assert a1.avg_color == RGB(*high_color)
        assert result.well("D4").viability == pytest.approx(0.0, abs=1e-9)
        assert result.well("C4").viability == pytest.approx(0.0, abs=1e-9)
        assert all(0.0 <= w.intensity <= 1.0 for w in result.wells)
        assert all(w.viability == pytest.approx(w.intensity * 100) for w in result.wells)

    def test_row_major_order(self, dose_plate, plate_grid, refs, dose_concentrations):
        low, high = refs
        result = analyze_plate(
            dose_plate, plate_grid, 4, 4, low, high, dose_concentrations, "nM",
        )
        assert [(w.row, w.col) for w in result.wells] == [
            (r, c) for r in range(4) for c in range(4)
        ]
        assert [w.id for w in result.wells[:5]] == ["A1", "A2", "A3", "A4", "B1"]
        assert result.wells[6].center == Point(100, 60)

    def test_radius_and_pixel_counts(self, dose_plate, plate_grid, refs, dose_concentrations):
        low, high = refs
        result = analyze_plate(
            dose_plate, plate_grid, 4, 4, low, high, dose_concentrations, "nM",
        )
        assert result.radius == pytest.approx(12.0)
        # Integer-centered disk of radius 12
        assert all(w.pixel_count == 441 for w in result.wells)
        assert all(w.status == "measured" for w in result.wells)

    def test_glare_does_not_shift_well(self, dose_plate, plate_grid, refs,
                                       dose_concentrations):
        low, high = refs
        glared = dose_plate.copy()
        # A blown-out streak inside B2 (center 60, 60)
        glared[55:58, 52:68] = 255
        result = analyze_plate(
            glared, plate_grid, 4, 4, low, high, dose_concentrations, "nM",
        )
        assert result.well("B2").viability == pytest.approx(100.0)

    def test_parallel_matches_serial(self, dose_plate, plate_grid, refs, dose_concentrations):
        low, high = refs
        args = (dose_plate, plate_grid, 4, 4, low, high, dose_concentrations, "nM")
        serial = PlateAnalyzer().analyze(*args)
        parallel = PlateAnalyzer(max_workers=4).analyze(*args)
        assert parallel == serial

    def test_progress_callback(self, dose_plate, plate_grid, refs, dose_concentrations):
        low, high = refs
        calls = []
        PlateAnalyzer().analyze(
            dose_plate, plate_grid, 4, 4, low, high, dose_concentrations, "nM",
            progress_callback=lambda current, total, well_id: calls.append(
                (current, total, well_id)
            ),
        )
        assert len(calls) == 16
        assert calls[0] == (1, 16, "A1")
        assert calls[-1] == (16, 16, "D4")

    def test_without_doses_reports_failure(self, dose_plate, plate_grid, refs):
        low, high = refs
        result = analyze_plate(dose_plate, plate_grid, 4, 4, low, high, [0, 0, 0, 0], "nM")
        assert result.ic50 is None
        assert result.ic50_failure == INSUFFICIENT_DOSE_DATA
        assert len(result.wells) == 16


class TestAnalyzeFailures:
    def test_invalid_radius(self, dose_plate, refs):
        low, high = refs
        grid = GridConfig(origin=Point(20, 20), u=Point(0, 0), v=Point(0, 40))
        with pytest.raises(InvalidRadiusError):
            analyze_plate(dose_plate, grid, 4, 4, low, high, [], "nM")

    def test_reference_outside_image(self, dose_plate, plate_grid, refs):
        _, high = refs
        with pytest.raises(EmptyReferenceSampleError) as exc_info:
            analyze_plate(
                dose_plate, plate_grid, 4, 4, Point(-500, -500), high, [], "nM",
            )
        assert exc_info.value.which == "low"

    def test_high_reference_outside_image(self, dose_plate, plate_grid, refs):
        low, _ = refs
        with pytest.raises(EmptyReferenceSampleError) as exc_info:
            analyze_plate(
                dose_plate, plate_grid, 4, 4, low, Point(1000, 1000), [], "nM",
            )
        assert exc_info.value.which == "high"

    @pytest.mark.parametrize("rows, cols", [(0, 4), (4, 0)])
    def test_empty_plate_rejected(self, dose_plate, plate_grid, refs, rows, cols):
        low, high = refs
        with pytest.raises(ValueError):
            analyze_plate(dose_plate, plate_grid, rows, cols, low, high, [], "nM")

    def test_non_rgb_image_rejected(self, plate_grid, refs):
        low, high = refs
        with pytest.raises(ValueError):
            analyze_plate(
                np.zeros((100, 100), dtype=np.uint8), plate_grid, 2, 2, low, high, [], "nM",
            )


class TestUnmeasuredAndDegenerate:
    def test_wells_outside_image_flagged(self, dose_plate, plate_grid, refs,
                                         dose_concentrations, caplog):
        low, high = refs
        with caplog.at_level(logging.WARNING, logger="viaplate"):
            result = analyze_plate(
                dose_plate, plate_grid, 4, 6, low, high, dose_concentrations, "nM",
            )
        outside = [w for w in result.wells if w.col >= 4]
        assert len(outside) == 8
        for well in outside:
            assert well.status == "unmeasured"
            assert well.pixel_count == 0
            assert well.avg_color == RGB(0, 0, 0)
            assert well.viability == 0.0
        assert "not measured" in caplog.text
        # Two off-image 0% wells per row: means 66.7, 50, 16.7 at 1, 10, 100 nM.
        assert result.dose_points[1].viability == pytest.approx(50.0)
        assert result.ic50.value == pytest.approx(10.0, rel=1e-6)

    def test_wells_outside_image_excluded_on_request(self, dose_plate, plate_grid, refs,
                                                    dose_concentrations):
        low, high = refs
        result = PlateAnalyzer(exclude_unmeasured=True).analyze(
            dose_plate, plate_grid, 4, 6, low, high, dose_concentrations, "nM",
        )
        assert sum(w.status == "unmeasured" for w in result.wells) == 8
        assert result.dose_points[1].viability == pytest.approx(75.0)
        assert result.ic50.value == pytest.approx(55.0)

    def test_identical_references(self, dose_plate, plate_grid, dose_concentrations, caplog):
        a1 = plate_grid.center(0, 0)
        with caplog.at_level(logging.WARNING, logger="viaplate"):
            result = analyze_plate(
                dose_plate, plate_grid, 4, 4, a1, a1, dose_concentrations, "nM",
            )
        assert result.calibration_degenerate
        assert all(w.status == "uncalibrated" for w in result.wells)
        assert all(w.viability == 0.0 for w in result.wells)
        assert result.ic50 is None
        assert "indistinguishable" in caplog.text

    def test_custom_radius_factor(self, dose_plate, plate_grid, refs, dose_concentrations):
        low, high = refs
        result = PlateAnalyzer(radius_factor=0.1).analyze(
            dose_plate, plate_grid, 4, 4, low, high, dose_concentrations, "nM",
        )
        assert result.radius == pytest.approx(4.0)
        assert result.wells[0].pixel_count == 49
