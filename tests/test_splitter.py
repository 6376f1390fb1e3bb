from __future__ import annotations

from pathlib import Path

from PIL import Image
import pytest

from unbooklet.errors import CropError
from unbooklet.imposition import Side
from unbooklet.pdf.splitter import CropRect, PillowImageSplitter, half_rects


def _two_tone(path: Path, width: int = 20, height: int = 10) -> Path:
    image = Image.new("RGB", (width, height), color=(255, 0, 0))
    image.paste((0, 0, 255), (width // 2, 0, width, height))
    image.save(path)
    return path


def test_half_rects_even_width() -> None:
    rects = half_rects(600, 450)
    assert rects[Side.LEFT] == CropRect(width=300, height=450, top=0, left=0)
    assert rects[Side.RIGHT] == CropRect(width=300, height=450, top=0, left=300)


def test_half_rects_odd_width_keeps_halves_equal() -> None:
    rects = half_rects(601, 10)
    assert rects[Side.LEFT].width == rects[Side.RIGHT].width == 300
    assert rects[Side.RIGHT].box == (300, 0, 600, 10)


def test_crop_rect_fits() -> None:
    assert CropRect(width=10, height=10).fits(10, 10)
    assert not CropRect(width=10, height=10, left=1).fits(10, 10)
    assert not CropRect(width=0, height=10).fits(10, 10)


@pytest.mark.asyncio
async def test_crop_writes_each_half(tmp_path: Path) -> None:
    source = _two_tone(tmp_path / "page1.png")
    splitter = PillowImageSplitter()
    rects = half_rects(20, 10)

    left = await splitter.crop(source, tmp_path / "2.png", rects[Side.LEFT])
    right = await splitter.crop(source, tmp_path / "1.png", rects[Side.RIGHT])

    with Image.open(left) as img:
        assert img.size == (10, 10)
        assert img.convert("RGB").getpixel((5, 5)) == (255, 0, 0)
    with Image.open(right) as img:
        assert img.size == (10, 10)
        assert img.convert("RGB").getpixel((5, 5)) == (0, 0, 255)


@pytest.mark.asyncio
async def test_crop_rejects_rect_outside_image(tmp_path: Path) -> None:
    source = _two_tone(tmp_path / "page1.png")
    destination = tmp_path / "1.png"

    with pytest.raises(CropError):
        await PillowImageSplitter().crop(
            source, destination, CropRect(width=15, height=10, left=10)
        )
    assert not destination.exists()


@pytest.mark.asyncio
async def test_crop_missing_source(tmp_path: Path) -> None:
    with pytest.raises(CropError):
        await PillowImageSplitter().crop(
            tmp_path / "missing.png", tmp_path / "1.png", CropRect(width=1, height=1)
        )
