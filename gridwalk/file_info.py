"""Per-file metadata formatting for the status bar and listing briefs."""

from __future__ import annotations

import grp
import math
import os
import pwd
import stat
import time
from pathlib import Path

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB", "EB")
FILE_INFO_FIELDS = ("mode", "size", "modtime")


def format_size(size: int) -> str:
    """Human readable size: ``0B``, ``500B``, ``1.5KB``, ``1.0MB`` ..."""
    if size <= 0:
        return "0B"
    unit_index = int(math.floor(math.log(size) / math.log(1024)))
    unit_index = min(unit_index, len(SIZE_UNITS) - 1)
    value = size / math.pow(1024, unit_index)
    if unit_index == 0:
        return f"{value:.0f}{SIZE_UNITS[unit_index]}"
    return f"{value:.1f}{SIZE_UNITS[unit_index]}"


def format_mode(mode: int) -> str:
    """``ls -l`` style permission string, including setuid/setgid/sticky."""
    if stat.S_ISDIR(mode):
        kind = "d"
    elif stat.S_ISLNK(mode):
        kind = "l"
    elif stat.S_ISSOCK(mode):
        kind = "s"
    elif stat.S_ISFIFO(mode):
        kind = "p"
    elif stat.S_ISCHR(mode):
        kind = "c"
    elif stat.S_ISBLK(mode):
        kind = "b"
    else:
        kind = "-"

    bits = []
    for mask, char in (
        (stat.S_IRUSR, "r"),
        (stat.S_IWUSR, "w"),
        (stat.S_IXUSR, "x"),
        (stat.S_IRGRP, "r"),
        (stat.S_IWGRP, "w"),
        (stat.S_IXGRP, "x"),
        (stat.S_IROTH, "r"),
        (stat.S_IWOTH, "w"),
        (stat.S_IXOTH, "x"),
    ):
        bits.append(char if mode & mask else "-")
    if mode & stat.S_ISUID:
        bits[2] = "s"
    if mode & stat.S_ISGID:
        bits[5] = "s"
    if mode & stat.S_ISVTX:
        bits[8] = "t"
    return kind + "".join(bits)


def format_mtime(mtime: float, now: float | None = None) -> str:
    """``Jan 2 15:04`` for this year, ``Jan 2 2006`` otherwise."""
    moment = time.localtime(mtime)
    current = time.localtime(time.time() if now is None else now)
    month = time.strftime("%b", moment)
    if moment.tm_year == current.tm_year:
        return f"{month} {moment.tm_mday} {moment.tm_hour:02d}:{moment.tm_min:02d}"
    return f"{month} {moment.tm_mday} {moment.tm_year}"


def owner_label(st: os.stat_result) -> str:
    """``user group`` names, numeric ids when lookups fail."""
    try:
        user = pwd.getpwuid(st.st_uid).pw_name
    except KeyError:
        user = str(st.st_uid)
    try:
        group = grp.getgrgid(st.st_gid).gr_name
    except KeyError:
        group = str(st.st_gid)
    return f"{user} {group}"


def display_file_name(path: Path) -> str:
    """File name, with `` -> target`` appended for symlinks."""
    name = path.name
    try:
        target = os.readlink(path)
    except OSError:
        return name
    return f"{name} -> {target}"


def brief_for(path: Path, fields: tuple[str, ...]) -> str:
    """Join the requested ``FILE_INFO_FIELDS`` for one listing row."""
    if not fields:
        return ""
    try:
        st = path.lstat()
    except OSError:
        return "???"
    parts: list[str] = []
    for name in fields:
        if name == "mode":
            parts.append(format_mode(st.st_mode))
        elif name == "size":
            parts.append(format_size(st.st_size).rjust(7))
        elif name == "modtime":
            parts.append(format_mtime(st.st_mtime).rjust(12))
    return " ".join(parts)


def status_line_for(path: Path) -> str:
    """Status bar text for the entry under the cursor."""
    try:
        st = path.lstat()
    except OSError:
        return display_file_name(path)
    return "  ".join(
        (
            format_mode(st.st_mode),
            owner_label(st),
            format_size(st.st_size),
            format_mtime(st.st_mtime),
            display_file_name(path),
        )
    )
