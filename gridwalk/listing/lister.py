"""Directory lister producing the flat, tree-expanded entry sequence.

The open-tree set is an immutable input: every call returns a fresh listing
so listing never reaches back into browser state.
"""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable, Collection
from dataclasses import dataclass, replace
from pathlib import Path

from ..ansi import display_width
from ..errors import ListError
from ..file_info import brief_for
from ..icons import IconMap
from .entries import FileEntry, format_display_name

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListOptions:
    """Filters, ordering, and display decorations for one listing."""

    hide_hidden: bool = False
    dir_only: bool = False
    dirs_first: bool = False
    icons: IconMap | None = None
    file_info_fields: tuple[str, ...] = ()
    selection_mark: str = "+"


@dataclass(frozen=True)
class Listing:
    entries: list[FileEntry]

    def __len__(self) -> int:
        return len(self.entries)


def _scan(directory: Path) -> list[os.DirEntry]:
    with os.scandir(directory) as it:
        return sorted(it, key=lambda item: item.name)


def _entry_from_dirent(dirent: os.DirEntry, directory: Path, depth: int) -> FileEntry:
    try:
        is_dir = dirent.is_dir()
    except OSError:
        is_dir = False
    try:
        mode = dirent.stat(follow_symlinks=False).st_mode
    except OSError:
        mode = 0
    return FileEntry(
        dir_path=directory,
        name=dirent.name,
        tree_depth=depth,
        is_dir=is_dir,
        is_symlink=stat.S_ISLNK(mode),
        is_executable=not is_dir and bool(mode & 0o111),
        mode=mode,
    )


def _list_level(
    directory: Path,
    depth: int,
    open_dirs: frozenset[Path],
    options: ListOptions,
    hidden_paths: frozenset[Path],
    scan: Callable[[Path], list[os.DirEntry]],
) -> list[FileEntry]:
    entries: list[FileEntry] = []
    for dirent in scan(directory):
        if options.hide_hidden and dirent.name.startswith("."):
            continue
        entry = _entry_from_dirent(dirent, directory, depth)
        if options.dir_only and not entry.is_dir:
            continue
        if entry.path in hidden_paths:
            continue
        entries.append(entry)

    if options.dirs_first:
        # sorted() is stable, so names stay in order inside each group.
        entries = sorted(entries, key=lambda item: not item.is_dir)

    out: list[FileEntry] = []
    for entry in entries:
        out.append(entry)
        if entry.is_dir and entry.path in open_dirs:
            try:
                out.extend(_list_level(entry.path, depth + 1, open_dirs, options, hidden_paths, scan))
            except OSError as exc:
                LOGGER.warning("cannot list directory %s: %s", entry.path, exc)
    return out


def _decorate(entry: FileEntry, options: ListOptions) -> FileEntry:
    icon = ""
    if options.icons is not None:
        icon = options.icons.icon_for(entry.name, entry.is_dir, entry.mode)
    brief = brief_for(entry.path, options.file_info_fields)
    decorated = replace(entry, icon=icon, brief=brief)
    display_name = format_display_name(decorated, selection_mark=options.selection_mark)
    return replace(decorated, display_name=display_name, display_width=display_width(display_name))


def list_directory(
    root: Path,
    open_dirs: Collection[Path] = frozenset(),
    options: ListOptions | None = None,
    hidden_paths: Collection[Path] = frozenset(),
    *,
    scan: Callable[[Path], list[os.DirEntry]] = _scan,
) -> Listing:
    """List ``root`` depth-first, expanding every directory in ``open_dirs``.

    ``hidden_paths`` are excluded wherever they occur (pending deletions).
    Raises ``ListError`` only when ``root`` itself cannot be read; unreadable
    open subdirectories are logged and contribute no entries.
    """
    options = options or ListOptions()
    try:
        flat = _list_level(
            root,
            0,
            frozenset(open_dirs),
            options,
            frozenset(hidden_paths),
            scan,
        )
    except OSError as exc:
        raise ListError(root, exc.strerror or str(exc)) from exc

    entries = [_decorate(entry, options) for entry in flat]
    return Listing(entries=entries)


def find_entry_index(entries: list[FileEntry], target: Path | str) -> int:
    """Index of ``target`` (a full path, or a bare name) in ``entries``; 0 if absent."""
    if isinstance(target, Path):
        for idx, entry in enumerate(entries):
            if entry.path == target:
                return idx
        return 0
    for idx, entry in enumerate(entries):
        if entry.name == target:
            return idx
    return 0
