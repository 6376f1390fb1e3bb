"""Sequential booklet pipeline: render, split, reorder, reassemble.

Documents are processed one at a time and pages one at a time. Each document
is driven through an explicit state machine::

    LOADING_DOCUMENT -> PARSING_PAGE(n) -> SPLITTING(n)
        -> PARSING_PAGE(n + 1) | DOCUMENT_DIVIDED
        -> ASSEMBLING_DOCUMENT -> DOCUMENT_GENERATED

and the run loop moves through ADVANCING_DOCUMENT to the next document, or to
FINISHED once the queue is empty. A ``DocumentError`` stops only the document
that raised it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
import os
from pathlib import Path
import shutil
import tempfile
from typing import Any, Protocol

from unbooklet.config.settings import (
    DEFAULT_OUTPUT_SUFFIX,
    DEFAULT_PAGE_HEIGHT,
    DEFAULT_PAGE_WIDTH,
    DEFAULT_RENDER_ZOOM,
    PageCanvas,
    UnbookletSettings,
)
from unbooklet.errors import CropError, DocumentError, RenderError, StartupError
from unbooklet.imposition import Side, logical_position
from unbooklet.pdf.assembler import PyMuPDFAssembler
from unbooklet.pdf.renderer import PyMuPDFRenderer, RenderedPage, count_pages
from unbooklet.pdf.splitter import CropRect, PillowImageSplitter, half_rects
from unbooklet.utils.image import write_bytes_async
from unbooklet.utils.log_utils import logger
from unbooklet.utils.progress import ProgressReporter


SCRATCH_PREFIX = "unbooklet-"


class PipelineState(str, Enum):
    LOADING_DOCUMENT = "loading-document"
    PARSING_PAGE = "parsing-page"
    SPLITTING = "splitting"
    DOCUMENT_DIVIDED = "document-divided"
    ASSEMBLING_DOCUMENT = "assembling-document"
    DOCUMENT_GENERATED = "document-generated"
    ADVANCING_DOCUMENT = "advancing-document"
    FINISHED = "finished"


class PageRenderer(Protocol):
    async def open(self, pdf_path: str | os.PathLike[str]) -> Any: ...

    async def render(self, document: Any, page_num: int) -> RenderedPage: ...


class ImageSplitter(Protocol):
    async def crop(
        self,
        source: str | os.PathLike[str],
        destination: str | os.PathLike[str],
        rect: CropRect,
    ) -> Path: ...


class DocumentAssembler(Protocol):
    async def assemble(
        self,
        image_paths: Sequence[str | os.PathLike[str]],
        output_path: str | os.PathLike[str],
        *,
        remove_sources: bool = True,
    ) -> Path: ...


class PageRendererFactory(Protocol):
    def __call__(self, zoom: float) -> PageRenderer: ...


class ImageSplitterFactory(Protocol):
    def __call__(self) -> ImageSplitter: ...


class DocumentAssemblerFactory(Protocol):
    def __call__(self, canvas: PageCanvas) -> DocumentAssembler: ...


def default_renderer_factory(zoom: float) -> PageRenderer:
    return PyMuPDFRenderer(zoom=zoom)


def default_splitter_factory() -> ImageSplitter:
    return PillowImageSplitter()


def default_assembler_factory(canvas: PageCanvas) -> DocumentAssembler:
    return PyMuPDFAssembler(canvas=canvas)


@dataclass(slots=True)
class DocumentContext:
    """Everything the state machine knows about the document in flight."""

    num_document: int
    pdf_path: Path
    scratch_dir: Path
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX
    state: PipelineState = PipelineState.LOADING_DOCUMENT
    num_pages: int = 0
    page_num: int = 0
    document: Any = None
    rendered: RenderedPage | None = None

    @property
    def name(self) -> str:
        return self.pdf_path.name

    @property
    def output_path(self) -> Path:
        return self.pdf_path.with_name(f"{self.pdf_path.stem}{self.output_suffix}.pdf")

    def raster_path(self, page_num: int) -> Path:
        return self.scratch_dir / f"page{page_num}.png"

    def half_path(self, position: int) -> Path:
        return self.scratch_dir / f"{position}.png"


@dataclass(slots=True)
class FailedDocument:
    pdf_path: Path
    state: PipelineState
    error: DocumentError


@dataclass(slots=True)
class RunSummary:
    """Outcome of one run over an input folder."""

    documents: list[Path] = field(default_factory=list)
    generated: list[Path] = field(default_factory=list)
    failed: list[FailedDocument] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(slots=True)
class PdfPipelineConfig:
    input_dir: Path
    render_zoom: float = DEFAULT_RENDER_ZOOM
    canvas: PageCanvas = field(
        default_factory=lambda: PageCanvas(width=DEFAULT_PAGE_WIDTH, height=DEFAULT_PAGE_HEIGHT)
    )
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX
    work_dir: Path | None = None
    keep_failed_scratch: bool = False
    renderer_factory: PageRendererFactory | None = None
    splitter_factory: ImageSplitterFactory | None = None
    assembler_factory: DocumentAssemblerFactory | None = None

    @classmethod
    def from_settings(cls, settings: UnbookletSettings, **overrides: Any) -> PdfPipelineConfig:
        values: dict[str, Any] = {
            "input_dir": settings.input_dir,
            "render_zoom": settings.render_zoom,
            "canvas": settings.canvas,
            "output_suffix": settings.output_suffix,
            "work_dir": settings.work_dir,
            "keep_failed_scratch": settings.keep_failed_scratch,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


def collect_documents(input_dir: Path, output_suffix: str = DEFAULT_OUTPUT_SUFFIX) -> list[Path]:
    """List the PDFs to process in ``input_dir``, sorted by filename.

    Previously generated outputs (``*<output_suffix>.pdf``) are skipped.

    Raises:
        StartupError: If ``input_dir`` does not exist or is not a directory.
    """
    if not input_dir.exists():
        raise StartupError(
            f'Folder "{input_dir}" not found, please create the folder and add the documents'
        )
    if not input_dir.is_dir():
        raise StartupError(f'"{input_dir}" is not a folder')

    output_marker = f"{output_suffix}.pdf".lower()
    documents: list[Path] = []
    for path in sorted(input_dir.iterdir()):
        if not path.is_file() or path.suffix.lower() != ".pdf":
            continue
        if output_suffix and path.name.lower().endswith(output_marker):
            logger.debug(f"Skipping previously generated output {path.name}")
            continue
        documents.append(path)
    return documents


_StateHandler = Callable[[DocumentContext], Awaitable[PipelineState]]


class BookletPipeline:
    """High-level coordinator for the per-document state machine."""

    def __init__(
        self,
        config: PdfPipelineConfig,
        *,
        progress_reporter: ProgressReporter | None = None,
    ) -> None:
        self._config = config
        self._progress = progress_reporter
        renderer_factory = config.renderer_factory or default_renderer_factory
        splitter_factory = config.splitter_factory or default_splitter_factory
        assembler_factory = config.assembler_factory or default_assembler_factory
        self._renderer = renderer_factory(config.render_zoom)
        self._splitter = splitter_factory()
        self._assembler = assembler_factory(config.canvas)
        self._handlers: dict[PipelineState, _StateHandler] = {
            PipelineState.LOADING_DOCUMENT: self._load_document,
            PipelineState.PARSING_PAGE: self._parse_page,
            PipelineState.SPLITTING: self._split_page,
            PipelineState.DOCUMENT_DIVIDED: self._document_divided,
            PipelineState.ASSEMBLING_DOCUMENT: self._assemble_document,
        }

    async def run(self) -> RunSummary:
        input_dir = self._config.input_dir
        documents = collect_documents(input_dir, self._config.output_suffix)
        summary = RunSummary(documents=list(documents))
        if not documents:
            logger.warning(f'Files not found in folder "{input_dir}"')
            return summary

        run_dir = self._create_run_dir()
        logger.debug(f"Scratch directory for this run: {run_dir}")

        if self._progress:
            total_pages = sum(count_pages(path) or 0 for path in documents)
            self._progress.start(total_pages)

        try:
            num_document = 0
            state = PipelineState.LOADING_DOCUMENT
            while state is not PipelineState.FINISHED:
                context = DocumentContext(
                    num_document=num_document,
                    pdf_path=documents[num_document],
                    scratch_dir=run_dir / f"doc-{num_document:04d}",
                    output_suffix=self._config.output_suffix,
                )
                await self.process_document(context, summary)

                num_document += 1
                state = (
                    PipelineState.LOADING_DOCUMENT
                    if num_document < len(documents)
                    else PipelineState.FINISHED
                )
        finally:
            if self._progress:
                self._progress.close()
            self._remove_run_dir(run_dir)

        if summary.generated:
            names = ", ".join(path.name for path in summary.generated)
            logger.info(f"Documents {names} generated!")
        if summary.failed:
            names = ", ".join(item.pdf_path.name for item in summary.failed)
            logger.error(f"{len(summary.failed)} document(s) failed: {names}")
        return summary

    async def process_document(self, context: DocumentContext, summary: RunSummary) -> None:
        """Drive one document to DOCUMENT_GENERATED, recording the outcome."""
        context.scratch_dir.mkdir(parents=True, exist_ok=False)
        try:
            while context.state is not PipelineState.DOCUMENT_GENERATED:
                handler = self._handlers[context.state]
                context.state = await handler(context)
        except DocumentError as exc:
            if exc.document is None:
                exc.document = context.name
            logger.error(f"Document {context.name} failed while {context.state.value}: {exc}")
            summary.failed.append(
                FailedDocument(pdf_path=context.pdf_path, state=context.state, error=exc)
            )
            self._discard_scratch(context)
            return
        finally:
            self._close_document(context)

        summary.generated.append(context.output_path)
        self._remove_scratch(context)
        context.state = PipelineState.ADVANCING_DOCUMENT

    async def _load_document(self, context: DocumentContext) -> PipelineState:
        context.document = await self._renderer.open(context.pdf_path)
        context.num_pages = context.document.page_count
        context.page_num = 1
        logger.info(f"PDF document {context.name} loaded ({context.num_pages} pages).")
        return PipelineState.PARSING_PAGE

    async def _parse_page(self, context: DocumentContext) -> PipelineState:
        page_num = context.page_num
        rendered = await self._renderer.render(context.document, page_num)
        raster_path = context.raster_path(page_num)
        try:
            await write_bytes_async(raster_path, rendered.png_bytes)
        except OSError as exc:
            raise RenderError(
                f"Error converting page {page_num} to a PNG image: {exc}",
                document=context.name,
                page_num=page_num,
            ) from exc
        context.rendered = rendered
        logger.debug(f"Finished converting page {page_num} to a PNG image.")
        return PipelineState.SPLITTING

    async def _split_page(self, context: DocumentContext) -> PipelineState:
        page_num = context.page_num
        rendered = context.rendered
        if rendered is None or rendered.page_num != page_num:
            raise RenderError(
                f"No raster available for page {page_num}",
                document=context.name,
                page_num=page_num,
            )

        raster_path = context.raster_path(page_num)
        rects = half_rects(rendered.width, rendered.height)
        for side in (Side.LEFT, Side.RIGHT):
            position = logical_position(page_num, context.num_pages, side)
            try:
                await self._splitter.crop(raster_path, context.half_path(position), rects[side])
            except CropError as exc:
                raise CropError(
                    f"Error while dividing {side.value} image on {raster_path.name}: {exc}",
                    document=context.name,
                ) from exc
            logger.debug(f"Divided {side.value} image of {raster_path.name} into {position}.png")

        try:
            raster_path.unlink()
        except OSError as exc:
            raise CropError(
                f"Cannot remove {raster_path.name}: {exc}", document=context.name
            ) from exc
        context.rendered = None
        if self._progress:
            self._progress.increment()

        if page_num < context.num_pages:
            context.page_num = page_num + 1
            return PipelineState.PARSING_PAGE
        logger.info(f"Document {context.name} divided into {context.num_pages * 2} images.")
        return PipelineState.DOCUMENT_DIVIDED

    async def _document_divided(self, context: DocumentContext) -> PipelineState:
        self._close_document(context)
        logger.debug(f"Passing the images of {context.name} to a PDF file.")
        return PipelineState.ASSEMBLING_DOCUMENT

    async def _assemble_document(self, context: DocumentContext) -> PipelineState:
        image_paths = [
            context.half_path(position) for position in range(1, context.num_pages * 2 + 1)
        ]
        output_path = await self._assembler.assemble(image_paths, context.output_path)
        logger.info(f"Document {output_path.name} generated.")
        return PipelineState.DOCUMENT_GENERATED

    def _create_run_dir(self) -> Path:
        work_dir = self._config.work_dir
        if work_dir is not None:
            work_dir.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX, dir=work_dir))

    def _discard_scratch(self, context: DocumentContext) -> None:
        if self._config.keep_failed_scratch:
            logger.warning(f"Keeping scratch files of {context.name} in {context.scratch_dir}")
            return
        self._remove_scratch(context)

    @staticmethod
    def _remove_scratch(context: DocumentContext) -> None:
        try:
            shutil.rmtree(context.scratch_dir)
        except OSError as exc:
            logger.warning(f"Could not remove scratch directory {context.scratch_dir}: {exc}")

    def _remove_run_dir(self, run_dir: Path) -> None:
        try:
            run_dir.rmdir()
        except OSError:
            logger.warning(f"Scratch directory {run_dir} is not empty; leaving it in place.")

    @staticmethod
    def _close_document(context: DocumentContext) -> None:
        document = context.document
        if document is None:
            return
        context.document = None
        close = getattr(document, "close", None)
        if callable(close):
            close()


async def run_booklet_pipeline(
    input_dir: str | os.PathLike[str],
    *,
    render_zoom: float = DEFAULT_RENDER_ZOOM,
    canvas: PageCanvas | None = None,
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX,
    work_dir: str | os.PathLike[str] | None = None,
    keep_failed_scratch: bool = False,
    renderer_factory: PageRendererFactory | None = None,
    splitter_factory: ImageSplitterFactory | None = None,
    assembler_factory: DocumentAssemblerFactory | None = None,
    progress_reporter: ProgressReporter | None = None,
) -> RunSummary:
    config = PdfPipelineConfig(
        input_dir=Path(input_dir),
        render_zoom=render_zoom,
        canvas=canvas or PageCanvas(width=DEFAULT_PAGE_WIDTH, height=DEFAULT_PAGE_HEIGHT),
        output_suffix=output_suffix,
        work_dir=Path(work_dir) if work_dir is not None else None,
        keep_failed_scratch=keep_failed_scratch,
        renderer_factory=renderer_factory,
        splitter_factory=splitter_factory,
        assembler_factory=assembler_factory,
    )
    pipeline = BookletPipeline(config, progress_reporter=progress_reporter)
    return await pipeline.run()
