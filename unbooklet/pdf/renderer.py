"""PyMuPDF-backed page rasterization."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import os

import fitz  # PyMuPDF

from unbooklet.config.settings import DEFAULT_RENDER_ZOOM
from unbooklet.errors import DocumentLoadError, RenderError
from unbooklet.utils.log_utils import logger


@dataclass(slots=True)
class RenderedPage:
    """PNG raster of one physical page."""

    page_num: int
    width: int
    height: int
    png_bytes: bytes


def _open_pdf(pdf_path: str) -> fitz.Document:
    try:
        document = fitz.open(pdf_path, filetype="pdf")
    except Exception as exc:
        raise DocumentLoadError(f"Cannot open {pdf_path}: {exc}") from exc

    if document.needs_pass:
        document.close()
        raise DocumentLoadError(f"{pdf_path} is encrypted")
    if document.page_count < 1:
        document.close()
        raise DocumentLoadError(f"{pdf_path} contains no pages")
    return document


class PyMuPDFRenderer:
    """Rasterize PDF pages at a fixed zoom factor."""

    def __init__(self, *, zoom: float = DEFAULT_RENDER_ZOOM) -> None:
        if zoom <= 0:
            raise ValueError("zoom must be > 0")
        self._zoom = zoom

    @property
    def zoom(self) -> float:
        return self._zoom

    async def open(self, pdf_path: str | os.PathLike[str]) -> fitz.Document:
        """Open ``pdf_path``; raises ``DocumentLoadError`` when unusable."""
        return await asyncio.to_thread(_open_pdf, os.fspath(pdf_path))

    async def render(self, document: fitz.Document, page_num: int) -> RenderedPage:
        """Rasterize the 1-based ``page_num`` of an opened document."""
        return await asyncio.to_thread(self._render_sync, document, page_num)

    def _render_sync(self, document: fitz.Document, page_num: int) -> RenderedPage:
        try:
            page = document[page_num - 1]
            pix = page.get_pixmap(matrix=fitz.Matrix(self._zoom, self._zoom))
            png_bytes = pix.tobytes("png")
        except Exception as exc:
            raise RenderError(
                f"Failed to rasterize page {page_num} of {document.name}: {exc}",
                page_num=page_num,
            ) from exc

        logger.debug(f"Rendered page {page_num} at {pix.width}x{pix.height} (zoom={self._zoom})")
        return RenderedPage(
            page_num=page_num,
            width=pix.width,
            height=pix.height,
            png_bytes=png_bytes,
        )


def count_pages(pdf_path: str | os.PathLike[str]) -> int | None:
    """Return the page count of ``pdf_path`` or ``None`` if it cannot be opened."""
    try:
        with fitz.open(os.fspath(pdf_path)) as doc:
            return doc.page_count
    except Exception as exc:
        logger.debug(f"Failed to open {pdf_path} for page counting: {exc}")
        return None


__all__ = ["PyMuPDFRenderer", "RenderedPage", "count_pages"]
