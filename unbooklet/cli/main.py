from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from functools import wraps
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

import typer  # type: ignore[import]

from unbooklet.utils.log_utils import configure_logging, logger

from . import unfold
from .unfold import format_plan


app = typer.Typer(
    help="Reorder scanned booklet PDFs into linear reading order.",
)


_P = ParamSpec("_P")
_T = TypeVar("_T")


def _synchronous(handler: Callable[_P, Coroutine[Any, Any, _T]]) -> Callable[_P, _T]:
    @wraps(handler)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _T:
        try:
            return asyncio.run(handler(*args, **kwargs))
        except KeyboardInterrupt as err:
            logger.info("Interrupted by user")
            raise typer.Exit(code=130) from err

    return wrapper


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show per-page progress messages on the console.",
    ),
) -> None:
    """Split booklet scans into halves and put them back in reading order."""
    if verbose:
        configure_logging(console_level="DEBUG", force=True)


@app.command("unfold")
@_synchronous
async def unfold_command(
    input_dir: Path | None = typer.Argument(
        None,
        help="Folder containing booklet PDFs. Defaults to UNBOOKLET_INPUT_DIR or ./documents.",
        show_default=False,
    ),
    zoom: float | None = typer.Option(
        None,
        "--zoom",
        min=0.1,
        help="Rasterization zoom factor (1.0 = 72 DPI). Default 1.5.",
    ),
    page_width: int | None = typer.Option(
        None,
        "--page-width",
        min=1,
        help="Output page width in PDF points. Default 600.",
    ),
    page_height: int | None = typer.Option(
        None,
        "--page-height",
        min=1,
        help="Output page height in PDF points. Default 820.",
    ),
    suffix: str | None = typer.Option(
        None,
        "--suffix",
        help="Suffix appended to output file names. Default '-processed'.",
    ),
    work_dir: Path | None = typer.Option(
        None,
        "--work-dir",
        help="Parent directory for per-run scratch files. Defaults to the system temp dir.",
        file_okay=False,
        dir_okay=True,
    ),
    keep_failed_scratch: bool | None = typer.Option(
        None,
        "--keep-failed-scratch/--discard-failed-scratch",
        help="Keep intermediate images of documents that failed for inspection.",
        show_default=False,
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="List the documents and their output page order without writing anything.",
    ),
) -> int:
    """Process every PDF in INPUT_DIR into a sibling <name>-processed.pdf."""
    options = unfold.UnfoldOptions(
        input_dir=input_dir,
        zoom=zoom,
        page_width=page_width,
        page_height=page_height,
        suffix=suffix,
        work_dir=work_dir,
        keep_failed_scratch=keep_failed_scratch,
        dry_run=dry_run,
    )
    exit_code = await unfold.run(options)
    if exit_code:
        raise typer.Exit(code=exit_code)
    return exit_code


@app.command("order")
def order_command(
    num_pages: int = typer.Argument(..., min=1, help="Number of physical (scanned) pages."),
) -> int:
    """Print which physical half lands on each output page."""
    typer.echo(format_plan(num_pages))
    return 0


__all__ = ["app"]


if __name__ == "__main__":
    app()
