"""Shared CLI utilities: Rich console, error handling, output path checks."""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Any, Callable

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

console = Console()
logger = logging.getLogger("viaplate.cli")

# Set by the --verbose flag on the top-level CLI group.
verbose: bool = False


def configure_logging(level: int = logging.DEBUG) -> None:
    """Route viaplate log records to the console through Rich."""
    package_logger = logging.getLogger("viaplate")
    package_logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        package_logger.addHandler(RichHandler(console=console, show_path=False))


def error_handler(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator wrapping CLI commands with standard error handling.

    Plate analysis errors (bad layout, unreadable image, unusable grid or
    reference points) exit with 1; anything else is a bug and exits with 2.
    Both are logged, so --verbose shows the traceback through Rich.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        from viaplate.core.exceptions import PlateAnalysisError

        try:
            return func(*args, **kwargs)
        except SystemExit:
            raise
        except PlateAnalysisError as e:
            logger.debug("%s failed", func.__name__, exc_info=True)
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            raise SystemExit(1)
        except Exception as e:
            if verbose:
                console.print(f"[red]Internal error:[/red] {escape(str(e))}")
                logger.exception("Unexpected error in %s", func.__name__)
            else:
                console.print(
                    f"[red]Internal error:[/red] {type(e).__name__}: {escape(str(e))}\n"
                    "[dim]Use --verbose for the full traceback.[/dim]"
                )
            raise SystemExit(2)

    return wrapper


def check_output_path(path: str, overwrite: bool) -> Path:
    """Validate a file path the command is about to write.

    Raises:
        SystemExit: With code 1 if the path is a directory, its parent is
            missing, or it exists and ``overwrite`` is False.
    """
    out_path = Path(path).expanduser()

    if out_path.is_dir():
        console.print(f"[red]Error:[/red] Output path is a directory: {out_path}")
        raise SystemExit(1)

    if not out_path.parent.exists():
        console.print(
            f"[red]Error:[/red] Parent directory does not exist: {out_path.parent}"
        )
        raise SystemExit(1)

    if out_path.exists() and not overwrite:
        console.print(
            f"[red]Error:[/red] Output file already exists: {out_path}\n"
            "Use --overwrite to replace it."
        )
        raise SystemExit(1)

    return out_path


def make_progress() -> Progress:
    """Progress bar showing wells done out of total and elapsed time.

    Transient, so the viability table printed afterwards starts clean.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description:<16}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
