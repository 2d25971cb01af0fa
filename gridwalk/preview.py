"""Preview pane content for the entry under the cursor.

Every builder is a pure function of ``(path, width, height)`` returning at most
``height`` lines, each clipped to ``width`` display columns. Text goes through
Pygments, images through Pillow (two pixels per cell with the lower half-block
glyph), anything else that looks binary becomes a hex dump.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from PIL import Image
from pygments import highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.util import ClassNotFound

from .ansi import clip_ansi_line

LOGGER = logging.getLogger(__name__)

IMAGE_SUFFIXES = frozenset({".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp"})
TEXT_READ_BYTES = 256 * 1024
BINARY_SNIFF_BYTES = 4096
HEX_BYTES_PER_LINE = 16
HALF_BLOCK = "▄"
# Below this alpha a pixel counts as transparent.
ALPHA_CUTOFF = 26
DEFAULT_PYGMENTS_STYLE = "monokai"

PREVIEW_DIRECTORY = "directory"
PREVIEW_TEXT = "text"
PREVIEW_IMAGE = "image"
PREVIEW_BINARY = "binary"
PREVIEW_ERROR = "error"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_FORMATTERS: dict[str, Terminal256Formatter] = {}


@dataclass(frozen=True)
class Preview:
    kind: str
    lines: tuple[str, ...]


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source
    return _CONTROL_RE.sub(lambda m: f"\\x{ord(m.group(0)):02x}", source)


def decode_text(data: bytes) -> str:
    """Decode as UTF-8 (dropping a BOM), falling back to latin-1."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def looks_binary(data: bytes) -> bool:
    return b"\0" in data[:BINARY_SNIFF_BYTES]


def _formatter(style: str) -> Terminal256Formatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        try:
            formatter = Terminal256Formatter(style=style)
        except ClassNotFound:
            LOGGER.warning("unknown pygments style %r, using %s", style, DEFAULT_PYGMENTS_STYLE)
            formatter = Terminal256Formatter(style=DEFAULT_PYGMENTS_STYLE)
        _FORMATTERS[style] = formatter
    return formatter


def highlight_source(source: str, path: Path, style: str = DEFAULT_PYGMENTS_STYLE) -> str:
    """Colorize ``source`` with the lexer Pygments picks for ``path``."""
    try:
        lexer = get_lexer_for_filename(path.name, source)
    except ClassNotFound:
        lexer = TextLexer()
    return highlight(source, lexer, _formatter(style))


def _fit(lines: list[str], width: int, height: int) -> tuple[str, ...]:
    return tuple(clip_ansi_line(line, width) for line in lines[: max(0, height)])


def preview_directory(path: Path, width: int, height: int, *, hide_hidden: bool = False) -> tuple[str, ...]:
    """Names in ``path`` (directories suffixed with ``/``), sorted by name."""
    with os.scandir(path) as it:
        dirents = sorted(it, key=lambda d: d.name)
    lines: list[str] = []
    for dirent in dirents:
        if hide_hidden and dirent.name.startswith("."):
            continue
        try:
            is_dir = dirent.is_dir()
        except OSError:
            is_dir = False
        lines.append(sanitize_terminal_text(dirent.name) + ("/" if is_dir else ""))
        if len(lines) >= height:
            break
    if not lines:
        lines.append("(empty)")
    return _fit(lines, width, height)


def preview_text(
    path: Path,
    width: int,
    height: int,
    *,
    style: str = DEFAULT_PYGMENTS_STYLE,
    color: bool = True,
) -> tuple[str, ...]:
    """First ``height`` lines of a text file, highlighted when ``color`` is set."""
    with path.open("rb") as handle:
        data = handle.read(TEXT_READ_BYTES)
    head = decode_text(data).splitlines()[:height]
    source = sanitize_terminal_text("\n".join(head).expandtabs(8))
    if color and source.strip():
        source = highlight_source(source, path, style)
    return _fit(source.splitlines(), width, height)


def preview_image(path: Path, width: int, height: int) -> tuple[str, ...]:
    """Render an image as truecolor half-blocks, keeping its aspect ratio."""
    if width <= 0 or height <= 0:
        return ()
    with Image.open(path) as img:
        img.seek(0)
        rgba = img.convert("RGBA")
    src_w, src_h = rgba.size
    if src_w == 0 or src_h == 0:
        return ()
    scale = min(width / src_w, (height * 2) / src_h)
    target_w = max(1, int(src_w * scale))
    target_h = max(2, int(src_h * scale))
    target_h += target_h % 2
    pixels = rgba.resize((target_w, target_h), Image.Resampling.LANCZOS).load()

    lines: list[str] = []
    for y in range(0, target_h - 1, 2):
        cells: list[str] = []
        for x in range(target_w):
            tr, tg, tb, ta = pixels[x, y]
            br, bg, bb, ba = pixels[x, y + 1]
            if ta < ALPHA_CUTOFF and ba < ALPHA_CUTOFF:
                cells.append("\033[0m ")
                continue
            cells.append(f"\033[38;2;{br};{bg};{bb}m\033[48;2;{tr};{tg};{tb}m{HALF_BLOCK}")
        lines.append("".join(cells) + "\033[0m")
    return tuple(lines[:height])


def hex_dump_line(offset: int, chunk: bytes) -> str:
    """One ``xxd``-style line: offset, grouped hex, printable ASCII."""
    hex_pairs = chunk.hex()
    groups = [hex_pairs[i : i + 4] for i in range(0, len(hex_pairs), 4)]
    hex_part = " ".join(groups).ljust(HEX_BYTES_PER_LINE * 2 + HEX_BYTES_PER_LINE // 2 - 1)
    text_part = "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)
    return f"{offset:08x}: {hex_part}  {text_part}"


def preview_binary(path: Path, width: int, height: int) -> tuple[str, ...]:
    with path.open("rb") as handle:
        data = handle.read(max(0, height) * HEX_BYTES_PER_LINE)
    lines = [
        hex_dump_line(offset, data[offset : offset + HEX_BYTES_PER_LINE])
        for offset in range(0, len(data), HEX_BYTES_PER_LINE)
    ]
    return _fit(lines, width, height)


def build_preview(
    path: Path,
    width: int,
    height: int,
    *,
    hide_hidden: bool = False,
    color: bool = True,
    style: str = DEFAULT_PYGMENTS_STYLE,
) -> Preview:
    """Pick the right previewer for ``path``; failures become an error preview."""
    try:
        if path.is_dir():
            return Preview(PREVIEW_DIRECTORY, preview_directory(path, width, height, hide_hidden=hide_hidden))
        if path.suffix.lower() in IMAGE_SUFFIXES:
            if not color:
                return Preview(PREVIEW_IMAGE, _fit([f"[image] {path.name}"], width, height))
            return Preview(PREVIEW_IMAGE, preview_image(path, width, height))
        with path.open("rb") as handle:
            head = handle.read(BINARY_SNIFF_BYTES)
        if looks_binary(head):
            return Preview(PREVIEW_BINARY, preview_binary(path, width, height))
        return Preview(PREVIEW_TEXT, preview_text(path, width, height, style=style, color=color))
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        LOGGER.debug("preview failed for %s: %s", path, exc)
        return Preview(PREVIEW_ERROR, _fit([f"cannot preview: {exc}"], width, height))
