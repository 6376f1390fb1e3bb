from __future__ import annotations

from pathlib import Path

import fitz
from PIL import Image
import pytest

from pdf_helpers import assert_color_close, center_color
from unbooklet.config import PageCanvas
from unbooklet.errors import AssemblyError
from unbooklet.pdf.assembler import PyMuPDFAssembler


COLORS = [(255, 0, 0), (0, 255, 0), (0, 0, 255)]


def _write_images(directory: Path) -> list[Path]:
    paths: list[Path] = []
    for position, color in enumerate(COLORS, start=1):
        path = directory / f"{position}.png"
        Image.new("RGB", (30, 45), color=color).save(path)
        paths.append(path)
    return paths


@pytest.mark.asyncio
async def test_assemble_preserves_order_and_page_size(tmp_path: Path) -> None:
    image_paths = _write_images(tmp_path)
    output_path = tmp_path / "out.pdf"

    result = await PyMuPDFAssembler().assemble(image_paths, output_path)

    assert result == output_path
    with fitz.open(str(output_path)) as doc:
        assert doc.page_count == 3
        for page in doc:
            assert (page.rect.width, page.rect.height) == (600, 820)
    for index, color in enumerate(COLORS):
        assert_color_close(center_color(output_path, index), color)
    assert not any(path.exists() for path in image_paths)
    assert not (tmp_path / "out.pdf.part").exists()


@pytest.mark.asyncio
async def test_assemble_custom_canvas_keeps_sources(tmp_path: Path) -> None:
    image_paths = _write_images(tmp_path)
    output_path = tmp_path / "out.pdf"

    await PyMuPDFAssembler(canvas=PageCanvas(width=300, height=400)).assemble(
        image_paths, output_path, remove_sources=False
    )

    with fitz.open(str(output_path)) as doc:
        assert (doc[0].rect.width, doc[0].rect.height) == (300, 400)
    assert all(path.exists() for path in image_paths)


@pytest.mark.asyncio
async def test_missing_image_publishes_nothing(tmp_path: Path) -> None:
    image_paths = _write_images(tmp_path)
    image_paths[1].unlink()
    output_path = tmp_path / "out.pdf"

    with pytest.raises(AssemblyError):
        await PyMuPDFAssembler().assemble(image_paths, output_path)

    assert not output_path.exists()
    assert not (tmp_path / "out.pdf.part").exists()


@pytest.mark.asyncio
async def test_failed_assembly_keeps_previous_output(tmp_path: Path) -> None:
    output_path = tmp_path / "out.pdf"
    output_path.write_bytes(b"previous")

    with pytest.raises(AssemblyError):
        await PyMuPDFAssembler().assemble([tmp_path / "missing.png"], output_path)

    assert output_path.read_bytes() == b"previous"


@pytest.mark.asyncio
async def test_empty_sequence_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(AssemblyError):
        await PyMuPDFAssembler().assemble([], tmp_path / "out.pdf")
