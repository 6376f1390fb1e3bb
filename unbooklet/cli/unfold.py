from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from unbooklet.config import PageCanvas, get_settings
from unbooklet.errors import StartupError
from unbooklet.imposition import reading_order
from unbooklet.pdf import BookletPipeline, PdfPipelineConfig, collect_documents
from unbooklet.pdf.renderer import count_pages
from unbooklet.utils.log_utils import logger
from unbooklet.utils.progress import TqdmProgressReporter


EXIT_OK = 0
EXIT_DOCUMENT_FAILED = 1
EXIT_STARTUP_ERROR = 2


@dataclass(slots=True)
class UnfoldOptions:
    input_dir: Path | None
    zoom: float | None
    page_width: int | None
    page_height: int | None
    suffix: str | None
    work_dir: Path | None
    keep_failed_scratch: bool | None
    dry_run: bool


def format_plan(num_pages: int) -> str:
    """Describe output order, e.g. ``p1R p2L p2R p1L`` for two physical pages."""
    return " ".join(
        f"p{page_num}{side.value[0].upper()}" for page_num, side in reading_order(num_pages)
    )


def build_config(options: UnfoldOptions) -> PdfPipelineConfig:
    settings = get_settings()
    canvas = settings.canvas
    if options.page_width is not None or options.page_height is not None:
        canvas = PageCanvas(
            width=options.page_width or canvas.width,
            height=options.page_height or canvas.height,
        )
    return PdfPipelineConfig.from_settings(
        settings,
        input_dir=options.input_dir,
        render_zoom=options.zoom,
        canvas=canvas,
        output_suffix=options.suffix,
        work_dir=options.work_dir,
        keep_failed_scratch=options.keep_failed_scratch,
    )


def _dry_run(config: PdfPipelineConfig) -> int:
    documents = collect_documents(config.input_dir, config.output_suffix)
    if not documents:
        logger.warning(f'Files not found in folder "{config.input_dir}"')
        return EXIT_OK
    for path in documents:
        num_pages = count_pages(path)
        if num_pages is None:
            logger.warning(f"DRY RUN: {path.name} cannot be opened")
            continue
        output_name = f"{path.stem}{config.output_suffix}.pdf"
        logger.info(f"DRY RUN: {path.name} ({num_pages} pages) -> {output_name}")
        logger.info(f"  order: {format_plan(num_pages)}")
    return EXIT_OK


async def run(options: UnfoldOptions) -> int:
    config = build_config(options)

    try:
        if options.dry_run:
            return _dry_run(config)

        progress = TqdmProgressReporter("unfold")
        try:
            summary = await BookletPipeline(config, progress_reporter=progress).run()
        finally:
            progress.close()
    except StartupError as exc:
        logger.error(str(exc))
        return EXIT_STARTUP_ERROR

    return EXIT_OK if summary.ok else EXIT_DOCUMENT_FAILED
