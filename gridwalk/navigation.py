"""Cursor movement over a column-major grid.

The flat listing index is the canonical cursor. ``(col, row)`` is derived on
demand with ``divmod(index, rows)``. Every move returns an index inside
``[0, file_count - 1]``, or 0 for an empty grid.

Wraparound rules:

* down past the last live cell lands on the first entry;
* up from the first entry lands on the last entry (last occupied row of the
  last column, which may be shorter than the others);
* left/right wrap across columns and snap to the last occupied row when they
  land past the end of the short last column.
"""

from __future__ import annotations

from collections.abc import Callable

from .grid import GridLayout


def cell_of(index: int, rows: int) -> tuple[int, int]:
    """Return ``(col, row)`` for a flat index."""
    if rows <= 0:
        return 0, 0
    return divmod(index, rows)


def index_of(col: int, row: int, rows: int) -> int:
    return col * rows + row


def clamp_index(index: int, file_count: int) -> int:
    if file_count <= 0:
        return 0
    return max(0, min(index, file_count - 1))


def _snap_last_column(col: int, row: int, layout: GridLayout) -> tuple[int, int]:
    """Pull a cell in the short last column back onto its last entry."""
    if col == layout.columns - 1 and index_of(col, row, layout.rows) >= layout.file_count:
        return layout.columns - 1, layout.last_column_rows - 1
    return col, row


def move_down(index: int, layout: GridLayout) -> int:
    if layout.is_empty:
        return 0
    col, row = cell_of(clamp_index(index, layout.file_count), layout.rows)
    row += 1
    if row >= layout.rows:
        row = 0
        col += 1
    if col >= layout.columns:
        col = 0
    if col == layout.columns - 1 and index_of(col, row, layout.rows) >= layout.file_count:
        col, row = 0, 0
    return index_of(col, row, layout.rows)


def move_up(index: int, layout: GridLayout) -> int:
    if layout.is_empty:
        return 0
    col, row = cell_of(clamp_index(index, layout.file_count), layout.rows)
    row -= 1
    if row < 0:
        row = layout.rows - 1
        col -= 1
    if col < 0:
        col = layout.columns - 1
        row = layout.last_column_rows - 1
    return index_of(col, row, layout.rows)


def move_left(index: int, layout: GridLayout) -> int:
    if layout.is_empty:
        return 0
    col, row = cell_of(clamp_index(index, layout.file_count), layout.rows)
    col -= 1
    if col < 0:
        col = layout.columns - 1
    col, row = _snap_last_column(col, row, layout)
    return index_of(col, row, layout.rows)


def move_right(index: int, layout: GridLayout) -> int:
    if layout.is_empty:
        return 0
    col, row = cell_of(clamp_index(index, layout.file_count), layout.rows)
    col += 1
    if col >= layout.columns:
        col = 0
    col, row = _snap_last_column(col, row, layout)
    return index_of(col, row, layout.rows)


def move_top(index: int, layout: GridLayout) -> int:
    if layout.is_empty:
        return 0
    col, _row = cell_of(clamp_index(index, layout.file_count), layout.rows)
    return index_of(col, 0, layout.rows)


def move_bottom(index: int, layout: GridLayout) -> int:
    if layout.is_empty:
        return 0
    col, _row = cell_of(clamp_index(index, layout.file_count), layout.rows)
    col, row = _snap_last_column(col, layout.rows - 1, layout)
    return index_of(col, row, layout.rows)


def move_leftmost(index: int, layout: GridLayout) -> int:
    if layout.is_empty:
        return 0
    _col, row = cell_of(clamp_index(index, layout.file_count), layout.rows)
    return index_of(0, row, layout.rows)


def move_rightmost(index: int, layout: GridLayout) -> int:
    if layout.is_empty:
        return 0
    _col, row = cell_of(clamp_index(index, layout.file_count), layout.rows)
    col, row = _snap_last_column(layout.columns - 1, row, layout)
    return index_of(col, row, layout.rows)


def page_up(index: int, layout: GridLayout) -> int:
    if layout.is_empty:
        return 0
    return clamp_index(index - (layout.capacity - 1), layout.file_count)


def page_down(index: int, layout: GridLayout) -> int:
    if layout.is_empty:
        return 0
    return clamp_index(index + (layout.capacity - 1), layout.file_count)


def move_home(index: int, layout: GridLayout) -> int:
    return move_top(move_leftmost(index, layout), layout)


def move_end(index: int, layout: GridLayout) -> int:
    return move_bottom(move_rightmost(index, layout), layout)


MOVES: dict[str, Callable[[int, GridLayout], int]] = {
    "up": move_up,
    "down": move_down,
    "left": move_left,
    "right": move_right,
    "top": move_top,
    "bottom": move_bottom,
    "leftmost": move_leftmost,
    "rightmost": move_rightmost,
    "page_up": page_up,
    "page_down": page_down,
    "home": move_home,
    "end": move_end,
}


def apply_move(name: str, index: int, layout: GridLayout) -> int:
    """Apply the movement called ``name``; raises ``KeyError`` for unknown names."""
    return MOVES[name](index, layout)
