"""Booklet imposition arithmetic.

A scanned booklet sheet carries one early page and one late page side by side.
``logical_position`` maps each half of a physical scan back to its place in
linear reading order.
"""

from __future__ import annotations

from enum import Enum


class Side(str, Enum):
    LEFT = "left"
    RIGHT = "right"


def logical_position(page_num: int, num_pages: int, side: Side) -> int:
    """Return the 1-based reading position of one half of a physical page.

    Args:
        page_num: 1-based physical page number, ``1 <= page_num <= num_pages``.
        num_pages: Number of physical pages in the scanned document.
        side: Which half of the physical page.

    Returns:
        A position in ``1 .. 2 * num_pages``. Over every page and both sides
        the positions form a permutation of that range.
    """
    mirrored = (num_pages * 2) - (page_num - 1)
    if page_num % 2 == 0:
        return page_num if side is Side.LEFT else mirrored
    return mirrored if side is Side.LEFT else page_num


def reading_order(num_pages: int) -> list[tuple[int, Side]]:
    """List ``(page_num, side)`` pairs sorted by their logical position."""
    halves = [(page_num, side) for page_num in range(1, num_pages + 1) for side in Side]
    return sorted(halves, key=lambda half: logical_position(half[0], num_pages, half[1]))


__all__ = ["Side", "logical_position", "reading_order"]
