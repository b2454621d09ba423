"""viaplate layout: create and inspect plate layout files."""

from __future__ import annotations

from pathlib import Path

import click

from viaplate.cli.utils import check_output_path, console, error_handler


@click.group()
def layout() -> None:
    """Create and inspect plate layout files."""


@layout.command("init")
@click.argument("path", type=click.Path())
@click.option("--rows", type=click.IntRange(min=1), default=8, show_default=True, help="Number of well rows.")
@click.option("--cols", type=click.IntRange(min=1), default=12, show_default=True, help="Number of well columns.")
@click.option("--units", default="nM", show_default=True, help="Concentration unit label.")
@click.option("--overwrite", is_flag=True, help="Overwrite the file if it exists.")
@error_handler
def init(path: str, rows: int, cols: int, units: str, overwrite: bool) -> None:
    """Write a template layout to PATH for editing."""
    from viaplate.io.layout import template_layout

    out_path = check_output_path(path, overwrite)
    template_layout(rows, cols, units=units).to_yaml(out_path)
    console.print(f"[green]Wrote {rows}x{cols} layout template to {out_path}[/green]")
    console.print("[dim]Edit the grid, reference points and concentrations before analyzing.[/dim]")


@layout.command("show")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@error_handler
def show(path: str) -> None:
    """Validate a layout and print its derived geometry."""
    from viaplate.io.layout import PlateLayout
    from viaplate.plate.grid import well_label, well_radius

    plate = PlateLayout.from_yaml(Path(path))
    grid = plate.grid
    radius = well_radius(grid, plate.radius_factor)
    last = grid.center(plate.rows - 1, plate.cols - 1)

    console.print(f"[bold]Plate:[/bold] {plate.rows} rows x {plate.cols} columns")
    console.print(f"  Origin (A1):   ({grid.origin.x:.1f}, {grid.origin.y:.1f})")
    console.print(f"  Column step u: ({grid.u.x:.2f}, {grid.u.y:.2f})")
    console.print(f"  Row step v:    ({grid.v.x:.2f}, {grid.v.y:.2f})")
    console.print(
        f"  Last well ({well_label(plate.rows - 1, plate.cols - 1)}): ({last.x:.1f}, {last.y:.1f})"
    )
    console.print(f"  Sampling radius: {radius:.1f} px (factor {plate.radius_factor:g})")
    console.print(f"  0% reference:   ({plate.ref_low.x:.1f}, {plate.ref_low.y:.1f})")
    console.print(f"  100% reference: ({plate.ref_high.x:.1f}, {plate.ref_high.y:.1f})")

    dosed = [c for c in plate.concentrations if c > 0]
    console.print(f"  Dosed rows: {len(dosed)} ({plate.units})")
