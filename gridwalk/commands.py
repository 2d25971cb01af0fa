"""Messages fed to ``BrowserState.update`` and the commands it hands back.

The browser state never touches the terminal or child processes itself. It
returns command objects and the driver in ``gridwalk.app`` carries
them out, feeding results back in as messages.

This module also holds the helpers that turn configuration into argv lists:
user-defined commands, the editor lookup, and the clipboard.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

LOGGER = logging.getLogger(__name__)

# Messages


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class SearchExpired:
    search_id: int


@dataclass(frozen=True)
class DeletionTick:
    """Some pending deletion may have reached the end of its grace period."""


@dataclass(frozen=True)
class ProcessFinished:
    """Result of a ``RunProcess``; ``error`` is set when it could not start."""

    returncode: int | None
    completed_message: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error and self.returncode == 0


# Commands


@dataclass(frozen=True)
class Quit:
    exit_code: int
    output_path: Path | None = None


@dataclass(frozen=True)
class RunProcess:
    argv: tuple[str, ...]
    completed_message: str = ""


@dataclass(frozen=True)
class Schedule:
    delay: float
    message: object


@dataclass(frozen=True)
class CopyToClipboard:
    text: str


# Custom commands

ARG_CURRENT_DIR = "currentDir"
ARG_CURRENT_FILE = "currentFile"
ARG_SELECTED_FILES = "selectedFiles"
ARG_SELECTED_OR_CURRENT_FILE = "selectedOrCurrentFile"
ARG_INPUT = "input"
ARG_TYPES = (
    ARG_CURRENT_DIR,
    ARG_CURRENT_FILE,
    ARG_SELECTED_FILES,
    ARG_SELECTED_OR_CURRENT_FILE,
    ARG_INPUT,
)
DEFAULT_INPUT_PROMPT = "Enter input: "


@dataclass(frozen=True)
class CustomCommandSpec:
    description: str
    cmd: str
    args: str = ARG_CURRENT_FILE
    key: str = ""
    prompt: str = ""
    completed_message: str = ""

    @property
    def wants_input(self) -> bool:
        return self.args == ARG_INPUT

    @property
    def input_prompt(self) -> str:
        return self.prompt or DEFAULT_INPUT_PROMPT

    def argv(self, *extra: str) -> tuple[str, ...]:
        return (*shlex.split(self.cmd), *extra)


def resolve_command_args(
    spec: CustomCommandSpec,
    *,
    current_dir: Path,
    current_file: Path | None,
    selected: Sequence[Path],
    input_text: str = "",
) -> tuple[str, ...] | None:
    """Return the extra argv for ``spec``, or ``None`` when it has nothing to act on.

    ``current_file`` is ``None`` for an empty listing. Directory-style
    arguments use the parent of the entry under the cursor, which differs from
    ``current_dir`` inside an expanded tree.
    """
    entry_dir = current_file.parent if current_file is not None else current_dir
    if spec.args == ARG_CURRENT_DIR:
        return (str(entry_dir),)
    if spec.args == ARG_CURRENT_FILE:
        return (str(current_file),) if current_file is not None else None
    if spec.args == ARG_SELECTED_FILES:
        return tuple(str(path) for path in selected) or None
    if spec.args == ARG_SELECTED_OR_CURRENT_FILE:
        if selected:
            return tuple(str(path) for path in selected)
        return (str(current_file),) if current_file is not None else None
    if spec.args == ARG_INPUT:
        text = input_text.strip()
        if not text:
            return None
        return (str(entry_dir), text)
    LOGGER.warning("invalid command args %r for %r", spec.args, spec.description)
    return None


# Editor

OPEN_WITH_ENV = "WALK_OPEN_WITH"
EDITOR_ENV_NAMES = ("WALK_EDITOR", "EDITOR")
FALLBACK_EDITOR = "less"


def parse_open_with(text: str) -> dict[str, str]:
    """Parse ``"ext:cmd;ext:cmd"``; malformed pairs are skipped."""
    mapping: dict[str, str] = {}
    for pair in text.split(";"):
        pair = pair.strip()
        if not pair:
            continue
        parts = pair.split(":")
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            continue
        mapping[parts[0].strip().lower().lstrip(".")] = parts[1].strip()
    return mapping


def editor_argv(
    path: Path,
    *,
    editor: str = "",
    open_with: Mapping[str, str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> tuple[str, ...]:
    """Command line that opens ``path``.

    Lookup order: per-extension ``open_with``, configured ``editor``,
    ``$WALK_EDITOR``, ``$EDITOR``, then ``less``.
    """
    env = os.environ if environ is None else environ
    extension = path.suffix.lower().lstrip(".")
    candidates = [(open_with or {}).get(extension, ""), editor]
    candidates.extend(env.get(name, "") for name in EDITOR_ENV_NAMES)
    for candidate in candidates:
        if not candidate or not candidate.strip():
            continue
        try:
            cmd = shlex.split(candidate)
        except ValueError as exc:
            LOGGER.warning("skipping editor command %r: %s", candidate, exc)
            continue
        if cmd:
            return (*cmd, str(path))
    return (FALLBACK_EDITOR, str(path))


# Clipboard

CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbcopy",),
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
    ("clip",),
)


def copy_to_clipboard(text: str) -> bool:
    """Best-effort clipboard copy with whichever tool is installed."""
    if not text:
        return False
    for command in CLIPBOARD_COMMANDS:
        if shutil.which(command[0]) is None:
            continue
        try:
            proc = subprocess.run(
                list(command),
                input=text,
                text=True,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as exc:
            LOGGER.debug("clipboard command %s failed: %s", command[0], exc)
            continue
        if proc.returncode == 0:
            return True
    return False
