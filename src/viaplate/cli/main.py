"""viaplate CLI: top-level Click group."""

from __future__ import annotations

import click


@click.group()
@click.version_option(package_name="viaplate")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging and full tracebacks on errors.")
def cli(verbose: bool) -> None:
    """viaplate: colorimetric viability and IC50 from well plate photos."""
    from viaplate.cli import utils

    utils.verbose = verbose
    if verbose:
        utils.configure_logging()


def _register_commands() -> None:
    """Register all subcommands. Imports are deferred to avoid loading heavy deps at startup."""
    from viaplate.cli.analyze import analyze
    from viaplate.cli.layout import layout

    cli.add_command(analyze)
    cli.add_command(layout)


_register_commands()
