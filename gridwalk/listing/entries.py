"""Flat, depth-tagged listing entries and their display names."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

TREE_INDENT = "    "
DIRECTORY_MARK = "/"
SYMLINK_MARK = "@"
EXECUTABLE_MARK = "*"


@dataclass(frozen=True)
class FileEntry:
    """One row of the flat listing.

    ``tree_depth`` is relative to the browsed root: expanded subdirectory
    children follow their parent with ``tree_depth + 1``. The display fields
    (``icon``, ``brief``, ``display_name``, ``display_width``) are assigned by
    the lister once the whole flat sequence is known.
    """

    dir_path: Path
    name: str
    tree_depth: int = 0
    is_dir: bool = False
    is_symlink: bool = False
    is_executable: bool = False
    mode: int = 0
    icon: str = ""
    brief: str = ""
    display_name: str = ""
    display_width: int = 0

    @property
    def path(self) -> Path:
        return self.dir_path / self.name

    @property
    def suffix(self) -> str:
        if self.is_dir:
            return DIRECTORY_MARK
        if self.is_symlink:
            return SYMLINK_MARK
        if self.is_executable:
            return EXECUTABLE_MARK
        return ""


def format_display_name(entry: FileEntry, *, selected: bool = False, selection_mark: str = "+") -> str:
    """Plain display text: brief, selection mark, icon, indent, name, suffix."""
    parts: list[str] = []
    if entry.brief:
        parts.append(entry.brief + " ")
    parts.append(selection_mark if selected else " ")
    if entry.icon:
        parts.append(" " + entry.icon)
    parts.append(" " + TREE_INDENT * entry.tree_depth + entry.name + entry.suffix)
    return "".join(parts)
