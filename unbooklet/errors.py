"""Exception types raised by the unbooklet pipeline."""

from __future__ import annotations


class UnbookletError(RuntimeError):
    """Base class for every error raised by unbooklet."""

    pass


class StartupError(UnbookletError):
    """Raised when the run cannot start, e.g. the input folder is missing."""

    pass


class DocumentError(UnbookletError):
    """Failure confined to a single document.

    The orchestrator records it against the document and moves on to the
    next one.
    """

    def __init__(self, message: str, *, document: str | None = None) -> None:
        super().__init__(message)
        self.document = document


class DocumentLoadError(DocumentError):
    """Raised when a PDF cannot be opened or contains no pages."""

    pass


class RenderError(DocumentError):
    """Raised when a page cannot be rasterized or its raster cannot be written."""

    def __init__(
        self,
        message: str,
        *,
        document: str | None = None,
        page_num: int | None = None,
    ) -> None:
        super().__init__(message, document=document)
        self.page_num = page_num


class CropError(DocumentError):
    """Raised when a half-page image cannot be extracted."""

    pass


class AssemblyError(DocumentError):
    """Raised when the output PDF cannot be composed or published."""

    pass


__all__ = [
    "AssemblyError",
    "CropError",
    "DocumentError",
    "DocumentLoadError",
    "RenderError",
    "StartupError",
    "UnbookletError",
]
