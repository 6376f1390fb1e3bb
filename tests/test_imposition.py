from __future__ import annotations

import pytest

from unbooklet.imposition import Side, logical_position, reading_order


@pytest.mark.parametrize("num_pages", list(range(1, 41)))
def test_positions_form_a_permutation(num_pages: int) -> None:
    positions = [
        logical_position(page_num, num_pages, side)
        for page_num in range(1, num_pages + 1)
        for side in Side
    ]
    assert sorted(positions) == list(range(1, num_pages * 2 + 1))


def test_two_page_booklet() -> None:
    assert logical_position(1, 2, Side.LEFT) == 4
    assert logical_position(1, 2, Side.RIGHT) == 1
    assert logical_position(2, 2, Side.LEFT) == 2
    assert logical_position(2, 2, Side.RIGHT) == 3


def test_two_page_reading_order() -> None:
    assert reading_order(2) == [
        (1, Side.RIGHT),
        (2, Side.LEFT),
        (2, Side.RIGHT),
        (1, Side.LEFT),
    ]


def test_four_page_booklet_literal_values() -> None:
    expected = {
        (1, Side.LEFT): 8,
        (1, Side.RIGHT): 1,
        (2, Side.LEFT): 2,
        (2, Side.RIGHT): 7,
        (3, Side.LEFT): 6,
        (3, Side.RIGHT): 3,
        (4, Side.LEFT): 4,
        (4, Side.RIGHT): 5,
    }
    for (page_num, side), position in expected.items():
        assert logical_position(page_num, 4, side) == position


@pytest.mark.parametrize("num_pages", [2, 4, 6, 10])
def test_odd_pages_pair_first_and_last(num_pages: int) -> None:
    for page_num in range(1, num_pages + 1, 2):
        left = logical_position(page_num, num_pages, Side.LEFT)
        right = logical_position(page_num, num_pages, Side.RIGHT)
        assert left + right == num_pages * 2 + 1
        assert right == page_num


@pytest.mark.parametrize("num_pages", [2, 4, 6, 10])
def test_even_pages_keep_left_half_in_place(num_pages: int) -> None:
    for page_num in range(2, num_pages + 1, 2):
        assert logical_position(page_num, num_pages, Side.LEFT) == page_num


def test_single_page() -> None:
    assert logical_position(1, 1, Side.LEFT) == 2
    assert logical_position(1, 1, Side.RIGHT) == 1
    assert reading_order(1) == [(1, Side.RIGHT), (1, Side.LEFT)]
