"""Terminal-column arithmetic for styled text.

Grid cells, the location bar and previews are sized in terminal columns, not
code points. SGR escapes take no columns and survive clipping untouched.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterator

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Columns taken by ``ch`` when drawn at visual column ``col``.

    Tabs run to the next 8-column stop, combining marks are zero width and
    East Asian wide characters take two cells.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    return 2 if unicodedata.east_asian_width(ch) in {"W", "F"} else 1


def iter_segments(text: str) -> Iterator[tuple[str, bool]]:
    """Split ``text`` into ``(segment, is_escape)`` pairs, one visible char per pair."""
    pos = 0
    end = len(text)
    while pos < end:
        match = ANSI_ESCAPE_RE.match(text, pos) if text[pos] == "\x1b" else None
        if match is not None:
            yield match.group(0), True
            pos = match.end()
        else:
            yield text[pos], False
            pos += 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def display_width(text: str) -> int:
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def pad_to_width(text: str, width: int) -> str:
    """Right-pad a possibly styled string with spaces up to ``width`` columns."""
    return text + " " * max(0, width - display_width(text))


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Cut a styled line to ``max_cols`` columns, expanding tabs to spaces.

    Escapes before the cut are kept, including the ones that directly follow
    the last visible cell (usually a reset).
    """
    if max_cols <= 0:
        return ""
    out: list[str] = []
    col = 0
    for segment, is_escape in iter_segments(text):
        if is_escape:
            out.append(segment)
            continue
        width = char_display_width(segment, col)
        if col >= max_cols or col + width > max_cols:
            break
        out.append(" " * width if segment == "\t" else segment)
        col += width
    return "".join(out)


def clip_left(text: str, max_cols: int) -> str:
    """Keep the rightmost ``max_cols`` columns of a plain string."""
    if max_cols <= 0:
        return ""
    if display_width(text) <= max_cols:
        return text
    kept = 0
    start = len(text)
    while start > 0:
        width = char_display_width(text[start - 1], 0)
        if kept + width > max_cols:
            break
        kept += width
        start -= 1
    return text[start:]
