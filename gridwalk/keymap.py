"""Key tokens, browser actions, and the dispatch table that joins them.

Key tokens are the strings produced by ``gridwalk.input.read_key``. Config
files may spell keys the friendlier way (``"ctrl+c"``, ``"pgdown"``,
``"space"``); ``normalize_key`` turns both spellings into one token.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

# Actions, in help order.
ACTION_HELP: dict[str, str] = {
    "up": "Move up",
    "down": "Move down",
    "left": "Move left",
    "right": "Move right",
    "top": "Jump to column top",
    "bottom": "Jump to column bottom",
    "leftmost": "Jump to first column",
    "rightmost": "Jump to last column",
    "page_up": "Page up",
    "page_down": "Page down",
    "home": "First entry",
    "end": "Last entry",
    "open": "Enter directory / open file",
    "back": "Exit directory",
    "up_dir": "Go to parent of entry's dir",
    "open_dir": "Enter directory under cursor",
    "open_tree": "Expand directory in place",
    "close_tree": "Collapse directory",
    "select": "Toggle selection",
    "preview": "Toggle preview",
    "search": "Fuzzy search",
    "delete": "Delete file or dir",
    "undo": "Undo delete",
    "yank": "Copy path to clipboard",
    "toggle_hidden": "Hide hidden files",
    "help": "Show help",
    "command_menu": "Custom commands",
    "quit": "Exit with cd",
    "force_quit": "Exit without cd",
}
ACTIONS = tuple(ACTION_HELP)

MOVE_ACTIONS = frozenset(
    {
        "up",
        "down",
        "left",
        "right",
        "top",
        "bottom",
        "leftmost",
        "rightmost",
        "page_up",
        "page_down",
        "home",
        "end",
    }
)

DEFAULT_BINDINGS: dict[str, tuple[str, ...]] = {
    "up": ("UP", "k"),
    "down": ("DOWN", "j"),
    "left": ("LEFT", "h"),
    "right": ("RIGHT", "l"),
    "top": ("SHIFT_UP", "g"),
    "bottom": ("SHIFT_DOWN", "G"),
    "leftmost": ("SHIFT_LEFT",),
    "rightmost": ("SHIFT_RIGHT",),
    "page_up": ("PAGE_UP",),
    "page_down": ("PAGE_DOWN",),
    "home": ("HOME",),
    "end": ("END",),
    "open": ("ENTER",),
    "back": ("BACKSPACE",),
    "up_dir": ("CTRL_LEFT",),
    "open_dir": ("CTRL_RIGHT",),
    "open_tree": ("t",),
    "close_tree": ("T",),
    "select": ("INSERT", "s"),
    "preview": (" ",),
    "search": ("/",),
    "delete": ("d", "DELETE"),
    "undo": ("u",),
    "yank": ("y",),
    "toggle_hidden": (".",),
    "help": ("?",),
    "command_menu": ("F2",),
    "quit": ("ESC", "q"),
    "force_quit": ("CTRL_C",),
}

_KEY_ALIASES = {
    "SPACE": " ",
    "RETURN": "ENTER",
    "ESCAPE": "ESC",
    "PGUP": "PAGE_UP",
    "PGDOWN": "PAGE_DOWN",
    "PGDN": "PAGE_DOWN",
    "DEL": "DELETE",
    "INS": "INSERT",
}

_KEY_LABELS = {
    " ": "space",
    "ESC": "esc",
    "ENTER": "enter",
    "BACKSPACE": "backspace",
    "DELETE": "delete",
    "INSERT": "insert",
}

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def normalize_key(name: str) -> str:
    """Return the ``read_key`` token for a configured key name."""
    if len(name) == 1:
        return name
    token = name.strip().replace("+", "_").replace("-", "_").upper()
    return _KEY_ALIASES.get(token, token)


def normalize_action(name: str) -> str:
    """Accept ``forceQuit`` as well as ``force_quit``."""
    return _CAMEL_RE.sub("_", name.strip()).lower()


def key_label(token: str) -> str:
    """Short human label for a key token (help screen, command menu)."""
    if token in _KEY_LABELS:
        return _KEY_LABELS[token]
    if len(token) == 1:
        return token
    return token.lower().replace("_", "+")


@dataclass(frozen=True)
class KeyMap:
    """Immutable action -> key tokens table."""

    bindings: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_BINDINGS))

    def keys_for(self, action: str) -> tuple[str, ...]:
        return tuple(self.bindings.get(action, ()))

    def with_overrides(self, overrides: Mapping[str, Sequence[str]]) -> KeyMap:
        """Return a copy where each overridden action gets exactly the given keys."""
        merged = dict(self.bindings)
        for action, keys in overrides.items():
            merged[normalize_action(action)] = tuple(normalize_key(key) for key in keys)
        return KeyMap(merged)

    def label(self, action: str) -> str:
        return ", ".join(key_label(token) for token in self.keys_for(action))


DEFAULT_KEYMAP = KeyMap()


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single action callback."""

    combos: tuple[str, ...]
    handler: Callable[[], object]


class KeyComboRegistry:
    """Small key-dispatch table with optional key normalization strategy."""

    def __init__(self, normalize: Callable[[str], str] | None = None) -> None:
        self._normalize = normalize if normalize is not None else self._identity
        self._handlers: dict[str, Callable[[], object]] = {}

    @staticmethod
    def _identity(key: str) -> str:
        return key

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        """Register one binding, overwriting existing handlers for same combos."""
        for combo in binding.combos:
            self._handlers[self._normalize(combo)] = binding.handler
        return self

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._normalize(key) in self._handlers

    def dispatch(self, key: str) -> object:
        """Invoke the handler bound to ``key``; ``None`` when nothing is bound."""
        handler = self._handlers.get(self._normalize(key))
        if handler is None:
            return None
        return handler()
