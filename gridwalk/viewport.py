"""Vertical scroll offset and per-directory cursor memory."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


def update_offset(cursor_row: int, offset: int, height: int, total_rows: int) -> int:
    """Return the first visible row so ``cursor_row`` is on screen.

    Scrolls down just enough, or up to reveal the cursor, then clamps the
    offset to ``[0, total_rows - height]``.
    """
    height = max(1, height)
    if cursor_row >= offset + height:
        offset = cursor_row - height + 1
    if cursor_row < offset:
        offset = cursor_row
    return max(0, min(offset, total_rows - height))


@dataclass(frozen=True)
class Position:
    index: int
    offset: int


class PositionMemory:
    """Last cursor index and scroll offset per browsed directory.

    Positions are flat indexes, so they stay valid when the grid is resized.
    """

    def __init__(self) -> None:
        self._positions: dict[Path, Position] = {}

    def save(self, path: Path, index: int, offset: int) -> None:
        self._positions[path] = Position(index=index, offset=offset)

    def get(self, path: Path) -> Position | None:
        return self._positions.get(path)

    def clear(self) -> None:
        self._positions.clear()

    def __contains__(self, path: object) -> bool:
        return path in self._positions

    def __len__(self) -> int:
        return len(self._positions)
