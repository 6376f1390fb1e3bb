"""Half-page extraction from rendered rasters."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from PIL import Image

from unbooklet.errors import CropError
from unbooklet.imposition import Side
from unbooklet.utils.image import load_image_async


@dataclass(frozen=True, slots=True)
class CropRect:
    """Pixel rectangle, same shape as the crop configs of the original tool."""

    width: int
    height: int
    top: int = 0
    left: int = 0

    @property
    def box(self) -> tuple[int, int, int, int]:
        """Pillow ``(left, upper, right, lower)`` box."""
        return (self.left, self.top, self.left + self.width, self.top + self.height)

    def fits(self, width: int, height: int) -> bool:
        return (
            self.width > 0
            and self.height > 0
            and self.left >= 0
            and self.top >= 0
            and self.left + self.width <= width
            and self.top + self.height <= height
        )


def half_rects(width: int, height: int) -> dict[Side, CropRect]:
    """Left and right halves of a ``width`` x ``height`` raster.

    Both halves are ``width // 2`` wide; on odd widths the last pixel column is
    dropped so the two output pages have identical sizes.
    """
    half = width // 2
    return {
        Side.LEFT: CropRect(width=half, height=height, top=0, left=0),
        Side.RIGHT: CropRect(width=half, height=height, top=0, left=half),
    }


class PillowImageSplitter:
    """Crop a region out of an image file into a new PNG file."""

    async def crop(
        self,
        source: str | os.PathLike[str],
        destination: str | os.PathLike[str],
        rect: CropRect,
    ) -> Path:
        source_path = Path(source)
        destination_path = Path(destination)
        try:
            image = await load_image_async(source_path)
        except OSError as exc:
            raise CropError(f"Cannot read {source_path}: {exc}") from exc

        if not rect.fits(image.width, image.height):
            raise CropError(
                f"Crop {rect} does not fit {source_path.name} ({image.width}x{image.height})"
            )

        region: Image.Image = image.crop(rect.box)
        try:
            region.save(destination_path, format="PNG")
        except (OSError, ValueError) as exc:
            raise CropError(f"Cannot write {destination_path}: {exc}") from exc
        return destination_path


__all__ = ["CropRect", "PillowImageSplitter", "half_rects"]
