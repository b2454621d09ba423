"""viaplate analyze: measure well viability and IC50 from a plate photo."""

from __future__ import annotations

from pathlib import Path

import click
from rich.table import Table

from viaplate.cli.utils import check_output_path, console, error_handler, make_progress


@click.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-l", "--layout", "layout_path", required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Plate layout YAML (grid, reference points, concentrations).",
)
@click.option(
    "-o", "--output", default=None, type=click.Path(),
    help="Write the IC50 and viability grid to this CSV file.",
)
@click.option(
    "--wells-csv", default=None, type=click.Path(),
    help="Write per-well colors, status and viability to this CSV file.",
)
@click.option(
    "--overwrite", is_flag=True,
    help="Overwrite output files if they exist.",
)
@click.option(
    "--radius-factor", type=click.FloatRange(min=0, min_open=True), default=None,
    help="Sampling radius as a fraction of the well pitch (overrides the layout).",
)
@click.option(
    "--workers", type=click.IntRange(min=1), default=1, show_default=True,
    help="Threads used to measure wells.",
)
@click.option(
    "--exclude-unmeasured", is_flag=True,
    help="Leave wells outside the image out of the dose row means.",
)
@error_handler
def analyze(
    image: str,
    layout_path: str,
    output: str | None,
    wells_csv: str | None,
    overwrite: bool,
    radius_factor: float | None,
    workers: int,
    exclude_unmeasured: bool,
) -> None:
    """Measure well viability and estimate the IC50 from a plate photo."""
    from viaplate.core.models import WELL_UNMEASURED
    from viaplate.io.export import export_summary_csv, export_wells_csv, format_ic50
    from viaplate.io.image import load_image
    from viaplate.io.layout import PlateLayout
    from viaplate.plate import PlateAnalyzer
    from viaplate.plate.dose_response import FAILURE_MESSAGES

    out_path = check_output_path(output, overwrite) if output else None
    wells_path = check_output_path(wells_csv, overwrite) if wells_csv else None

    layout = PlateLayout.from_yaml(Path(layout_path))
    plate_image = load_image(image)

    analyzer = PlateAnalyzer(
        radius_factor=radius_factor or layout.radius_factor,
        max_workers=workers,
        exclude_unmeasured=exclude_unmeasured,
    )

    with make_progress() as progress:
        task = progress.add_task("Measuring wells...", total=layout.rows * layout.cols)

        def on_progress(current: int, total: int, well_id: str) -> None:
            progress.update(
                task, total=total, completed=current,
                description=f"Measuring {well_id}",
            )

        result = analyzer.analyze(
            plate_image,
            layout.grid,
            layout.rows,
            layout.cols,
            layout.ref_low,
            layout.ref_high,
            layout.concentrations,
            layout.units,
            progress_callback=on_progress,
        )

    console.print()
    console.print(_viability_table(result, layout))

    if result.calibration_degenerate:
        console.print(
            "[yellow]Warning:[/yellow] reference colors are indistinguishable; "
            "viabilities are not meaningful."
        )
    unmeasured = [w.id for w in result.wells if w.status == WELL_UNMEASURED]
    if unmeasured:
        console.print(
            f"[yellow]Warning:[/yellow] {len(unmeasured)} well(s) outside the image: "
            f"{', '.join(unmeasured)}"
        )

    console.print()
    if result.ic50 is not None:
        console.print(f"[green]IC50: {format_ic50(result)}[/green]")
    else:
        reason = FAILURE_MESSAGES.get(result.ic50_failure, "unknown")
        console.print(f"[yellow]IC50 not determined[/yellow] [dim]({reason})[/dim]")

    if out_path is not None:
        export_summary_csv(result, out_path, layout.concentrations, layout.units)
        console.print(f"[green]Exported summary to {out_path}[/green]")
    if wells_path is not None:
        export_wells_csv(result, wells_path)
        console.print(f"[green]Exported wells to {wells_path}[/green]")


def _viability_table(result, layout) -> Table:
    """Rich table of viability (%) with one line per plate row."""
    from viaplate.io.export import row_headers

    headers = row_headers(layout.rows, layout.concentrations, layout.units)
    table = Table(title=f"Well Viability (%) at radius {result.radius:.1f} px")
    table.add_column("Row", style="bold")
    for col in range(layout.cols):
        table.add_column(str(col + 1), justify="right")

    grid = result.viability_grid()
    by_pos = {(w.row, w.col): w for w in result.wells}
    for row in range(layout.rows):
        cells = []
        for col in range(layout.cols):
            well = by_pos[(row, col)]
            text = f"{grid[row, col]:.1f}"
            cells.append(text if well.is_measured else f"[dim]{text}[/dim]")
        table.add_row(headers[row], *cells)
    return table
