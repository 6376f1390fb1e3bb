"""Compose half-page images into the reordered output PDF."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
import os
from pathlib import Path

import fitz  # PyMuPDF

from unbooklet.config.settings import DEFAULT_PAGE_HEIGHT, DEFAULT_PAGE_WIDTH, PageCanvas
from unbooklet.errors import AssemblyError
from unbooklet.utils.log_utils import logger


PARTIAL_SUFFIX = ".part"


class PyMuPDFAssembler:
    """Write one image per page onto a fixed-size canvas.

    Each image is scaled to fit the canvas and centered. The PDF is saved under
    ``<output>.part`` and renamed to ``output_path`` only once every page has
    been placed and the file is fully written.
    """

    def __init__(self, *, canvas: PageCanvas | None = None) -> None:
        self._canvas = canvas or PageCanvas(width=DEFAULT_PAGE_WIDTH, height=DEFAULT_PAGE_HEIGHT)

    @property
    def canvas(self) -> PageCanvas:
        return self._canvas

    async def assemble(
        self,
        image_paths: Sequence[str | os.PathLike[str]],
        output_path: str | os.PathLike[str],
        *,
        remove_sources: bool = True,
    ) -> Path:
        paths = [Path(p) for p in image_paths]
        return await asyncio.to_thread(
            self._assemble_sync, paths, Path(output_path), remove_sources
        )

    def _assemble_sync(
        self, image_paths: list[Path], output_path: Path, remove_sources: bool
    ) -> Path:
        if not image_paths:
            raise AssemblyError(f"No images to assemble into {output_path.name}")

        partial_path = output_path.with_name(output_path.name + PARTIAL_SUFFIX)
        try:
            self._write_pdf(image_paths, partial_path, remove_sources)
            os.replace(partial_path, output_path)
        except AssemblyError:
            partial_path.unlink(missing_ok=True)
            raise
        except OSError as exc:
            partial_path.unlink(missing_ok=True)
            raise AssemblyError(f"Assembling {output_path.name} failed: {exc}") from exc
        return output_path

    def _write_pdf(
        self, image_paths: list[Path], partial_path: Path, remove_sources: bool
    ) -> None:
        doc = fitz.open()
        try:
            for position, image_path in enumerate(image_paths, start=1):
                if not image_path.is_file():
                    raise AssemblyError(f"Missing image for position {position}: {image_path}")
                page = doc.new_page(width=self._canvas.width, height=self._canvas.height)
                try:
                    page.insert_image(page.rect, filename=str(image_path), keep_proportion=True)
                except Exception as exc:
                    raise AssemblyError(
                        f"Cannot place {image_path.name} on page {position}: {exc}"
                    ) from exc
                if remove_sources:
                    image_path.unlink()
                logger.debug(f"Placed {image_path.name} as page {position}")

            try:
                doc.save(str(partial_path), garbage=3, deflate=True)
            except Exception as exc:
                raise AssemblyError(f"Cannot save {partial_path}: {exc}") from exc
        finally:
            doc.close()


__all__ = ["PARTIAL_SUFFIX", "PyMuPDFAssembler"]
