"""Reorder scanned booklet PDFs into linear reading order."""

from .imposition import Side, logical_position, reading_order


__version__ = "0.1.0"

__all__ = ["Side", "__version__", "logical_position", "reading_order"]
