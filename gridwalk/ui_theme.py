"""UI palette definitions and the ``render`` styling primitive.

Themes are immutable ANSI palettes built once at startup from defaults plus
the ``colors`` section of the config file. ``--no-color`` swaps in a palette
of empty codes so every ``render`` call becomes a passthrough.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, replace

RESET = "\033[0m"
_HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")


@dataclass(frozen=True)
class ColorSpec:
    """Foreground/background pair as ``#RRGGBB`` strings (either may be unset)."""

    fg: str | None = None
    bg: str | None = None


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    bold: str
    cursor: str
    bar: str
    search: str
    danger: str
    directory: str
    symlink: str
    executable: str
    selected: str
    git_modified: str
    git_added: str
    git_untracked: str
    match: str
    preview_border: str


def _rgb(hex_color: str) -> tuple[int, int, int] | None:
    match = _HEX_COLOR_RE.match(hex_color.strip())
    if match is None:
        return None
    value = match.group(1)
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def sgr_for(spec: ColorSpec) -> str:
    """Translate a color spec into one truecolor SGR sequence ("" when empty)."""
    params: list[str] = []
    if spec.fg:
        rgb = _rgb(spec.fg)
        if rgb is not None:
            params.append("38;2;{};{};{}".format(*rgb))
    if spec.bg:
        rgb = _rgb(spec.bg)
        if rgb is not None:
            params.append("48;2;{};{};{}".format(*rgb))
    if not params:
        return ""
    return f"\033[{';'.join(params)}m"


DEFAULT_THEME = UITheme(
    name="default",
    reset=RESET,
    bold="\033[1m",
    cursor=sgr_for(ColorSpec(fg="#FFFFFF", bg="#825DF2")),
    bar=sgr_for(ColorSpec(fg="#FFFFFF", bg="#5C5C5C")),
    search=sgr_for(ColorSpec(fg="#FFFFFF", bg="#499F1C")),
    danger=sgr_for(ColorSpec(fg="#FFFFFF", bg="#FF0000")),
    directory="",
    symlink="",
    executable="",
    selected="\033[1m",
    git_modified=sgr_for(ColorSpec(fg="#588FE6")),
    git_added=sgr_for(ColorSpec(fg="#6ECC8E")),
    git_untracked=sgr_for(ColorSpec(fg="#D95C50")),
    match="\033[4m",
    preview_border=sgr_for(ColorSpec(fg="#825DF2")),
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    bold="",
    cursor="",
    bar="",
    search="",
    danger="",
    directory="",
    symlink="",
    executable="",
    selected="",
    git_modified="",
    git_added="",
    git_untracked="",
    match="",
    preview_border="",
)

# Config ``colors`` keys mapped onto theme fields.
CONFIGURABLE_COLORS: dict[str, str] = {
    "cursor": "cursor",
    "statusBar": "bar",
    "directory": "directory",
    "symlink": "symlink",
    "executable": "executable",
    "selectedFile": "selected",
}


def build_theme(overrides: Mapping[str, ColorSpec] | None = None, *, no_color: bool = False) -> UITheme:
    """Return the concrete palette for the requested overrides and color mode."""
    if no_color:
        return PLAIN_THEME
    changes: dict[str, str] = {}
    for key, spec in (overrides or {}).items():
        field_name = CONFIGURABLE_COLORS.get(key)
        if field_name is None:
            continue
        code = sgr_for(spec)
        if code:
            changes[field_name] = code
    if not changes:
        return DEFAULT_THEME
    return replace(DEFAULT_THEME, name="custom", **changes)


def render(text: str, style: str, theme: UITheme = DEFAULT_THEME) -> str:
    """Wrap ``text`` in ``style``; passthrough when the style is empty."""
    if not style or not text:
        return text
    reset = theme.reset or RESET
    return f"{style}{text}{reset}"


__all__ = [
    "ColorSpec",
    "UITheme",
    "DEFAULT_THEME",
    "PLAIN_THEME",
    "CONFIGURABLE_COLORS",
    "build_theme",
    "render",
    "sgr_for",
]
