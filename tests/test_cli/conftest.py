"""Shared fixtures for CLI module tests."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import tifffile
import yaml
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def plate_tiff(tmp_path: Path, dose_plate: np.ndarray) -> Path:
    """The 4x4 dose plate written as an RGB TIFF."""
    path = tmp_path / "plate.tif"
    tifffile.imwrite(path, dose_plate, photometric="rgb")
    return path


@pytest.fixture
def layout_file(tmp_path: Path, dose_concentrations: list[float]) -> Path:
    """Layout matching the dose plate, using corner-well calibration."""
    path = tmp_path / "layout.yaml"
    data = {
        "rows": 4,
        "cols": 4,
        "grid": {
            "top_left": [20, 20],
            "top_right": [140, 20],
            "bottom_left": [20, 140],
        },
        "references": {"low": [140, 140], "high": [20, 20]},
        "concentrations": dose_concentrations,
        "units": "nM",
    }
    with open(path, "w") as f:
        yaml.safe_dump(data, f)
    return path
