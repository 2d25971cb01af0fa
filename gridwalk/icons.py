"""File icons keyed the way ``lf``/``LS_COLORS`` icon files are.

An icon file holds whitespace separated ``key icon`` pairs, one per line.
Keys are file-type codes (``di``, ``fi``, ``ex``, ``ln`` ...), ``*.ext``
patterns, exact names with a trailing ``/`` for directories, or
``name*``/``*name`` globs.
"""

from __future__ import annotations

import logging
import os
import shlex
import stat
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

LOGGER = logging.getLogger(__name__)

DEFAULT_ICON_PAIRS = """
# type codes
di  📁
fi  📄
ex  ⚙
ln  🔗
pi  |
so  =
bd  💾
cd  💾
# well known names
.git/        🌱
node_modules/ 📦
Makefile     🔨
Dockerfile   🐳
# extensions
*.py    🐍
*.go    🐹
*.rs    🦀
*.js    📜
*.ts    📜
*.md    📝
*.txt   📄
*.json  📋
*.toml  ⚙
*.yml   ⚙
*.yaml  ⚙
*.html  🌐
*.css   🎨
*.sh    🐚
*.png   🖼
*.jpg   🖼
*.jpeg  🖼
*.gif   🖼
*.pdf   📕
*.zip   📦
*.tar   📦
*.gz    📦
"""


def read_pairs(lines: Iterable[str]) -> list[tuple[str, str]]:
    """Parse ``key value`` pairs, honoring quotes and ``#`` comments.

    Raises ``ValueError`` for any line that does not split into exactly two
    fields.
    """
    pairs: list[tuple[str, str]] = []
    for line in lines:
        fields = shlex.split(line, comments=True)
        if not fields:
            continue
        if len(fields) != 2:
            raise ValueError(f"expected pair but found: {line.strip()}")
        pairs.append((fields[0], fields[1]))
    return pairs


@dataclass(frozen=True)
class IconMap:
    icons: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> IconMap:
        icons: dict[str, str] = {}
        for key, value in pairs:
            if key.startswith("~"):
                key = os.path.expanduser(key)
            if os.path.isabs(key):
                key = os.path.normpath(key)
            icons[key] = value
        return cls(icons)

    def icon_for(self, name: str, is_dir: bool, mode: int) -> str:
        """Return the icon for an entry, falling back to a blank cell."""
        icons = self.icons
        if is_dir and f"{name}/" in icons:
            return icons[f"{name}/"]

        key = ""
        if is_dir and mode & stat.S_ISVTX and mode & 0o002:
            key = "tw"
        elif is_dir and mode & 0o002:
            key = "ow"
        elif is_dir and mode & stat.S_ISVTX:
            key = "st"
        elif is_dir:
            key = "di"
        elif stat.S_ISLNK(mode):
            key = "ln"
        elif stat.S_ISFIFO(mode):
            key = "pi"
        elif stat.S_ISSOCK(mode):
            key = "so"
        elif stat.S_ISBLK(mode):
            key = "bd"
        elif stat.S_ISCHR(mode):
            key = "cd"
        elif mode & stat.S_ISUID:
            key = "su"
        elif mode & stat.S_ISGID:
            key = "sg"
        if key in icons:
            return icons[key]

        for candidate in (f"{name}*", f"*{name}", f"{name}.*"):
            if candidate in icons:
                return icons[candidate]
        _, ext = os.path.splitext(name)
        if ext and f"*{ext.lower()}" in icons:
            return icons[f"*{ext.lower()}"]
        if mode & 0o111 and not is_dir and "ex" in icons:
            return icons["ex"]
        if "fi" in icons:
            return icons["fi"]
        return " "


def load_icon_map(path: Path | None = None) -> IconMap:
    """Build the icon map from ``path`` when readable, else from the defaults."""
    if path is not None:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError:
            LOGGER.debug("no icon file at %s, using built-in icons", path)
        else:
            try:
                return IconMap.from_pairs(read_pairs(text.splitlines()))
            except ValueError as exc:
                LOGGER.warning("reading icons file %s: %s", path, exc)
    return IconMap.from_pairs(read_pairs(DEFAULT_ICON_PAIRS.splitlines()))
