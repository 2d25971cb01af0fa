"""Column-major grid layout for the flat file listing.

``compute_grid`` picks a column count biased toward a third of the screen
height, caps it for long listings, compacts empty cells, and then drops
columns until a full row fits the viewport width. Entries fill each column
top to bottom before moving right.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from .errors import LayoutError

DEFAULT_SEPARATOR = "    "


@dataclass(frozen=True)
class LayoutOptions:
    max_columns: int = 15
    long_list_limit: int = 100
    long_list_columns: int = 4
    separator: str = DEFAULT_SEPARATOR


@dataclass(frozen=True)
class GridLayout:
    """Converged grid shape for one listing and viewport."""

    columns: int
    rows: int
    column_widths: tuple[int, ...]
    file_count: int

    @classmethod
    def empty(cls) -> GridLayout:
        return cls(0, 0, (), 0)

    @property
    def is_empty(self) -> bool:
        return self.file_count == 0

    @property
    def capacity(self) -> int:
        return self.columns * self.rows

    @property
    def last_column_rows(self) -> int:
        """Occupied rows in the (possibly short) last column."""
        if self.is_empty:
            return 0
        return self.rows - (self.capacity - self.file_count)


def _column_widths(widths: Sequence[int], columns: int, rows: int) -> tuple[int, ...]:
    out: list[int] = []
    for col in range(columns):
        chunk = widths[col * rows : (col + 1) * rows]
        out.append(max(chunk, default=0))
    return tuple(out)


def _compact(file_count: int, columns: int, height: int) -> tuple[int, int]:
    """Row/column compaction for a fixed column estimate."""
    rows = math.ceil(file_count / columns)
    min_rows = height // 3

    # Drop rows while the remaining cells still hold every entry.
    while (rows - 1) * columns >= file_count and rows > min_rows:
        rows -= 1

    # The last column must hold at least one entry.
    while rows * columns - file_count >= rows and columns > 1:
        columns -= 1

    if columns == 1 and rows > file_count:
        rows = file_count
    return columns, rows


def initial_columns(file_count: int, height: int, options: LayoutOptions) -> int:
    """Column estimate before width fitting."""
    columns = file_count // max(1, height // 3)
    columns = max(1, columns)
    if file_count > options.long_list_limit:
        columns = options.long_list_columns
    columns = min(columns, options.max_columns)
    return max(1, columns)


def compute_grid(
    widths: Sequence[int],
    width: int,
    height: int,
    options: LayoutOptions | None = None,
) -> GridLayout:
    """Lay out ``len(widths)`` entries into a grid fitting ``width`` x ``height``.

    ``widths`` holds each entry's display width in listing order. A name wider
    than the viewport still yields a one-column grid; the renderer clips.
    """
    options = options or LayoutOptions()
    file_count = len(widths)
    if file_count == 0:
        return GridLayout.empty()

    columns = initial_columns(file_count, height, options)
    separator_width = len(options.separator)
    max_iterations = columns + 1

    for _ in range(max_iterations):
        columns, rows = _compact(file_count, columns, height)
        column_widths = _column_widths(widths, columns, rows)
        total = sum(column_widths) + separator_width * (columns - 1)
        if total > width and columns > 1:
            columns -= 1
            continue
        return GridLayout(columns, rows, column_widths, file_count)

    raise LayoutError(
        f"grid layout did not converge for {file_count} entries in {width}x{height}"
    )
