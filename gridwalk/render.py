"""Frame composition for the browser.

``compose_frame`` turns a ``BrowserState`` into the list of screen lines
(location bar, grid rows with the optional preview pane, status bar) without
touching the terminal. ``frame_text`` wraps those lines in the cursor-home and
clear sequences the driver writes out.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

from .ansi import clip_ansi_line, clip_left, display_width, pad_to_width
from .commands import CustomCommandSpec
from .file_info import status_line_for
from .git_status import STATUS_ADDED, STATUS_MODIFIED, STATUS_UNTRACKED
from .keymap import ACTION_HELP, KeyMap, key_label
from .listing import FileEntry, format_display_name
from .state import BrowserState
from .ui_theme import UITheme, render

EMPTY_LISTING_TEXT = "No files"
MENU_TITLE = "Custom commands"


def location_text(path: Path, width: int, home: Path | None = None) -> str:
    """Current path with the home directory shortened to ``~``, left-clipped."""
    text = str(path)
    home_text = str(home if home is not None else Path.home())
    if home_text and home_text != os.sep and (text == home_text or text.startswith(home_text + os.sep)):
        text = "~" + text[len(home_text) :]
    return clip_left(text, width)


def _bar(text: str, width: int, style: str, theme: UITheme) -> str:
    return render(pad_to_width(clip_ansi_line(text, width), width), style, theme)


def _entry_style(entry: FileEntry, state: BrowserState, theme: UITheme) -> str:
    if entry.path in state.selected:
        return theme.selected
    git_class = state.git_overlay.get(entry.path)
    if git_class == STATUS_UNTRACKED:
        return theme.git_untracked
    if git_class == STATUS_ADDED:
        return theme.git_added
    if git_class == STATUS_MODIFIED:
        return theme.git_modified
    if entry.is_dir:
        return theme.directory
    if entry.is_symlink:
        return theme.symlink
    if entry.is_executable:
        return theme.executable
    return ""


def _underline_matches(text: str, start: int, positions: Sequence[int], base_style: str, theme: UITheme) -> str:
    """Underline characters ``start + p`` of a plain ``text`` inside ``base_style``."""
    if not positions or not theme.match:
        return text
    marked = {start + pos for pos in positions}
    out: list[str] = []
    for idx, ch in enumerate(text):
        if idx in marked:
            out.append(f"{theme.match}{ch}{theme.reset}{base_style}")
        else:
            out.append(ch)
    return "".join(out)


def format_cell(entry: FileEntry, state: BrowserState, index: int, cell_width: int, theme: UITheme) -> str:
    mark = state.config.selection_mark
    text = pad_to_width(format_display_name(entry, selected=entry.path in state.selected, selection_mark=mark), cell_width)
    if index == state.index:
        style = theme.cursor
        if state.search.active and state.search.matched_positions:
            # Character offsets, so the marker lands on the right code point.
            start = len(format_display_name(entry, selection_mark=mark)) - len(entry.name + entry.suffix)
            text = _underline_matches(text, start, state.search.matched_positions, style, theme)
        return render(text, style, theme)
    return render(text, _entry_style(entry, state, theme), theme)


def grid_lines(state: BrowserState, theme: UITheme) -> list[str]:
    """Visible grid rows, each clipped to the listing width.

    A failed listing shows its error instead of the (stale) grid.
    """
    layout = state.layout
    width = state.listing_width
    if state.list_error:
        return [render(clip_ansi_line(state.list_error, width), theme.danger, theme)]
    if layout.is_empty:
        return [clip_ansi_line(EMPTY_LISTING_TEXT, width)]
    separator = state.config.layout.separator
    entries = state.entries
    last_row = min(layout.rows, state.offset + state.grid_height)
    lines: list[str] = []
    for row in range(state.offset, last_row):
        cells: list[str] = []
        for col in range(layout.columns):
            index = col * layout.rows + row
            if index >= layout.file_count:
                break
            cells.append(format_cell(entries[index], state, index, layout.column_widths[col], theme))
        lines.append(clip_ansi_line(separator.join(cells), width))
    return lines


def bordered(lines: Sequence[str], width: int, height: int, theme: UITheme) -> list[str]:
    """Frame ``lines`` (already fitted to ``width-2`` x ``height-2``) in a box."""
    inner_width = max(0, width - 2)
    top = render("┌" + "─" * inner_width + "┐", theme.preview_border, theme)
    bottom = render("└" + "─" * inner_width + "┘", theme.preview_border, theme)
    side = render("│", theme.preview_border, theme)
    out = [top]
    for row in range(max(0, height - 2)):
        line = lines[row] if row < len(lines) else ""
        out.append(side + pad_to_width(line, inner_width) + theme.reset + side)
    out.append(bottom)
    return out[:height]


def preview_lines(state: BrowserState, theme: UITheme) -> list[str]:
    width = state.preview_width
    height = state.grid_height
    if width <= 0:
        return []
    border = state.config.with_border and width > 2 and height > 2
    inner_width, inner_height = (width - 2, height - 2) if border else (width, height)
    preview = state.preview(inner_width, inner_height)
    lines = list(preview.lines) if preview is not None else []
    if border:
        return bordered(lines, width, height, theme)
    return lines


def help_lines(keymap: KeyMap, custom_commands: Sequence[CustomCommandSpec] = ()) -> list[str]:
    """Key reference, one ``keys  description`` line per bound action."""
    rows = [(keymap.label(action), description) for action, description in ACTION_HELP.items() if keymap.keys_for(action)]
    for spec in custom_commands:
        if spec.key:
            rows.append((key_label(spec.key), spec.description))
    key_width = max((display_width(keys) for keys, _ in rows), default=0)
    return [f"  {pad_to_width(keys, key_width)}  {description}" for keys, description in rows]


def menu_lines(state: BrowserState, theme: UITheme) -> list[str]:
    commands = state.config.custom_commands
    name_width = max((display_width(spec.description) for spec in commands), default=0)
    lines = [render(MENU_TITLE, theme.bold, theme)]
    for idx, spec in enumerate(commands):
        key = key_label(spec.key) if spec.key else ""
        text = f" {pad_to_width(spec.description, name_width)}  {key} "
        lines.append(render(text, theme.cursor, theme) if idx == state.menu_index else text)
    return lines


def status_text(state: BrowserState, now: float) -> tuple[str, str]:
    """Return ``(text, kind)`` for the status bar; kind picks the style."""
    if state.prompt is not None:
        return f"{state.prompt.command.input_prompt}{state.prompt.text}█", "bar"
    if state.deletions:
        newest = state.deletions.pending[-1]
        seconds = int(state.deletions.seconds_left(now) + 0.999)
        return f"Deleted: {newest.path.name} (u to undo, {seconds}s)", "danger"
    if state.search.active:
        return f"/{state.search.query}", "search"
    if state.status_message:
        return state.status_message, "bar"
    current = state.current_path
    if current is None:
        return "", "bar"
    return status_line_for(current), "bar"


def compose_frame(state: BrowserState, theme: UITheme, now: float, home: Path | None = None) -> list[str]:
    width = state.width
    height = state.grid_height
    lines = [_bar(location_text(state.path, width, home), width, theme.bar, theme)]

    if state.show_help:
        body = [clip_ansi_line(line, width) for line in help_lines(state.config.keymap, state.config.custom_commands)]
        body = body[:height]
    else:
        body = grid_lines(state, theme)
        if state.menu_index is not None:
            menu = menu_lines(state, theme)
            body = [clip_ansi_line(line, state.listing_width) for line in menu] + body[len(menu) :]
            body = body[:height]
        side = preview_lines(state, theme)
        if side:
            gap = " " * (width - state.listing_width - state.preview_width)
            merged: list[str] = []
            for row in range(height):
                left = body[row] if row < len(body) else ""
                right = side[row] if row < len(side) else ""
                merged.append(pad_to_width(left + theme.reset, state.listing_width) + gap + right + theme.reset)
            body = merged

    body = body + [""] * (height - len(body))
    lines.extend(body)

    text, kind = status_text(state, now)
    style = {"danger": theme.danger, "search": theme.search}.get(kind, theme.bar)
    lines.append(_bar(text, width, style, theme))
    return lines


def frame_text(lines: Sequence[str]) -> str:
    """Cursor home, then every line cleared to end of line."""
    return "\033[H" + "\r\n".join(line + "\033[K" for line in lines)
