"""Tests for the column-major grid layout engine."""

from __future__ import annotations

import unittest

from gridwalk.grid import GridLayout, LayoutOptions, _compact, compute_grid, initial_columns


class GridLayoutTests(unittest.TestCase):
    def test_empty_listing_has_empty_grid(self) -> None:
        layout = compute_grid([], 80, 24)

        self.assertEqual((layout.columns, layout.rows), (0, 0))
        self.assertTrue(layout.is_empty)
        self.assertEqual(layout.last_column_rows, 0)

    def test_seven_files_in_nine_rows_use_two_columns_of_four(self) -> None:
        self.assertEqual(initial_columns(7, 9, LayoutOptions()), 2)

        layout = compute_grid([5] * 7, 80, 9)

        self.assertEqual((layout.columns, layout.rows), (2, 4))
        self.assertEqual(layout.last_column_rows, 3)
        self.assertEqual(layout.column_widths, (5, 5))

    def test_single_file_is_one_cell_regardless_of_viewport(self) -> None:
        for width, height in ((1, 1), (80, 3), (200, 60), (10, 100)):
            with self.subTest(width=width, height=height):
                layout = compute_grid([12], width, height)
                self.assertEqual((layout.columns, layout.rows), (1, 1))

    def test_long_listing_forces_long_list_columns(self) -> None:
        options = LayoutOptions(long_list_limit=100, long_list_columns=4)
        for height in (9, 30, 90):
            with self.subTest(height=height):
                layout = compute_grid([3] * 200, 300, height, options)
                self.assertEqual(layout.columns, 4)
                self.assertEqual(layout.rows, 50)

    def test_max_columns_caps_the_estimate(self) -> None:
        options = LayoutOptions(max_columns=3)

        self.assertEqual(initial_columns(90, 9, options), 3)

    def test_wide_names_drop_columns_until_row_fits(self) -> None:
        layout = compute_grid([30] * 10, 80, 9)

        self.assertEqual((layout.columns, layout.rows), (2, 5))
        self.assertLessEqual(sum(layout.column_widths) + 4 * (layout.columns - 1), 80)

    def test_name_wider_than_viewport_still_yields_one_column(self) -> None:
        layout = compute_grid([200, 3, 3], 40, 9)

        self.assertEqual(layout.columns, 1)
        self.assertEqual(layout.rows, 3)

    def test_separator_width_counts_toward_row_width(self) -> None:
        wide_separator = LayoutOptions(separator=" " * 30)

        narrow = compute_grid([10] * 6, 50, 6)
        wide = compute_grid([10] * 6, 50, 6, wide_separator)

        self.assertGreater(narrow.columns, wide.columns)

    def test_compact_keeps_last_column_non_empty(self) -> None:
        columns, rows = _compact(5, 4, 30)

        self.assertGreater(5, (columns - 1) * rows)
        self.assertLessEqual(5, columns * rows)

    def test_converged_grid_invariant_holds_for_many_shapes(self) -> None:
        for file_count in range(1, 130):
            for width, height in ((20, 3), (80, 9), (80, 24), (200, 50)):
                widths = [3 + (idx % 7) for idx in range(file_count)]
                layout = compute_grid(widths, width, height)
                with self.subTest(file_count=file_count, width=width, height=height):
                    self.assertGreaterEqual(layout.columns, 1)
                    self.assertGreaterEqual(layout.rows, 1)
                    self.assertLess((layout.columns - 1) * layout.rows, file_count)
                    self.assertLessEqual(file_count, layout.columns * layout.rows)
                    self.assertEqual(len(layout.column_widths), layout.columns)

    def test_capacity_and_last_column_rows(self) -> None:
        layout = GridLayout(3, 4, (1, 1, 1), 10)

        self.assertEqual(layout.capacity, 12)
        self.assertEqual(layout.last_column_rows, 2)


if __name__ == "__main__":
    unittest.main()
