"""Cursor movement over column-major grids, including wraparound."""

from __future__ import annotations

import unittest

from gridwalk.grid import GridLayout
from gridwalk.navigation import (
    MOVES,
    apply_move,
    cell_of,
    clamp_index,
    index_of,
    move_bottom,
    move_down,
    move_end,
    move_home,
    move_left,
    move_leftmost,
    move_right,
    move_rightmost,
    move_top,
    move_up,
    page_down,
    page_up,
)

# 7 entries in 2 columns of 4; the last column holds 3.
SHORT_LAST = GridLayout(2, 4, (5, 5), 7)
FULL = GridLayout(3, 4, (5, 5, 5), 12)


class NavigationTests(unittest.TestCase):
    def test_cell_round_trip(self) -> None:
        for layout in (SHORT_LAST, FULL):
            for index in range(layout.file_count):
                col, row = cell_of(index, layout.rows)
                self.assertEqual(index_of(col, row, layout.rows), index)

    def test_down_walks_every_entry_and_cycles(self) -> None:
        for layout in (SHORT_LAST, FULL):
            for start in range(layout.file_count):
                index = start
                seen = set()
                for _ in range(layout.file_count):
                    seen.add(index)
                    index = move_down(index, layout)
                self.assertEqual(index, start)
                self.assertEqual(seen, set(range(layout.file_count)))

    def test_down_past_last_entry_wraps_to_first(self) -> None:
        self.assertEqual(move_down(6, SHORT_LAST), 0)
        self.assertEqual(move_down(3, SHORT_LAST), 4)

    def test_up_from_first_entry_lands_on_last_entry(self) -> None:
        self.assertEqual(move_up(0, SHORT_LAST), 6)
        self.assertEqual(move_up(4, SHORT_LAST), 3)

    def test_up_and_down_are_inverse_inside_a_column(self) -> None:
        for index in range(FULL.file_count):
            _col, row = cell_of(index, FULL.rows)
            if row < FULL.rows - 1:
                self.assertEqual(move_up(move_down(index, FULL), FULL), index)
            if row > 0:
                self.assertEqual(move_down(move_up(index, FULL), FULL), index)

    def test_left_and_right_are_inverse_for_interior_columns(self) -> None:
        for index in range(FULL.file_count):
            col, _row = cell_of(index, FULL.rows)
            if 0 < col < FULL.columns - 1:
                self.assertEqual(move_right(move_left(index, FULL), FULL), index)
                self.assertEqual(move_left(move_right(index, FULL), FULL), index)

    def test_horizontal_moves_wrap_and_snap_to_short_column(self) -> None:
        self.assertEqual(move_right(3, SHORT_LAST), 6)
        self.assertEqual(move_left(3, SHORT_LAST), 6)
        self.assertEqual(move_right(4, SHORT_LAST), 0)
        self.assertEqual(move_left(0, SHORT_LAST), 4)

    def test_column_and_row_jumps(self) -> None:
        self.assertEqual(move_top(6, SHORT_LAST), 4)
        self.assertEqual(move_bottom(1, SHORT_LAST), 3)
        self.assertEqual(move_bottom(4, SHORT_LAST), 6)
        self.assertEqual(move_leftmost(6, SHORT_LAST), 2)
        self.assertEqual(move_rightmost(1, SHORT_LAST), 5)
        self.assertEqual(move_rightmost(3, SHORT_LAST), 6)

    def test_home_end_and_paging(self) -> None:
        self.assertEqual(move_home(6, SHORT_LAST), 0)
        self.assertEqual(move_end(0, SHORT_LAST), 6)
        self.assertEqual(page_down(0, SHORT_LAST), 6)
        self.assertEqual(page_up(6, SHORT_LAST), 0)
        self.assertEqual(page_down(0, FULL), 11)
        self.assertEqual(page_up(11, FULL), 0)

    def test_every_move_stays_in_range(self) -> None:
        for name in MOVES:
            for index in range(SHORT_LAST.file_count):
                with self.subTest(move=name, index=index):
                    moved = apply_move(name, index, SHORT_LAST)
                    self.assertGreaterEqual(moved, 0)
                    self.assertLess(moved, SHORT_LAST.file_count)

    def test_empty_grid_keeps_cursor_at_zero(self) -> None:
        empty = GridLayout.empty()
        for name in MOVES:
            self.assertEqual(apply_move(name, 3, empty), 0)

    def test_unknown_move_raises(self) -> None:
        with self.assertRaises(KeyError):
            apply_move("sideways", 0, FULL)

    def test_clamp_index(self) -> None:
        self.assertEqual(clamp_index(10, 3), 2)
        self.assertEqual(clamp_index(-1, 3), 0)
        self.assertEqual(clamp_index(5, 0), 0)


if __name__ == "__main__":
    unittest.main()
