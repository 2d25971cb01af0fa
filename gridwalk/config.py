"""JSON config loading into an immutable ``BrowserConfig``.

The config file lives at ``user_config_dir("gridwalk")/config.json`` unless
``$GRIDWALK_CONFIG`` names another file. Access is defensive: a missing file,
malformed JSON, or a value of the wrong type is logged and the default for
that setting is used, so the browser always starts.

Example::

    {
      "keys": {"forceQuit": ["ctrl+q"], "openTree": ["t", "right"]},
      "colors": {"cursor": {"fg": "#000000", "bg": "#FFD700"}},
      "layout": {"maxColumns": 8, "fileInfo": ["mode", "size"]},
      "editor": "nvim",
      "openWith": {"pdf": "zathura"},
      "search": {"mode": "modal"},
      "deleteGracePeriod": 10,
      "customCommands": [
        {"description": "Make dir", "key": "ctrl+n", "cmd": "mkdir -p",
         "args": "input", "prompt": "New dir: "}
      ]
    }
"""

from __future__ import annotations

import json
import logging
import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from .ansi import display_width
from .commands import ARG_CURRENT_FILE, ARG_TYPES, OPEN_WITH_ENV, CustomCommandSpec, parse_open_with
from .deletion import DEFAULT_GRACE_SECONDS
from .errors import ConfigError
from .file_info import FILE_INFO_FIELDS
from .grid import DEFAULT_SEPARATOR, LayoutOptions
from .keymap import DEFAULT_KEYMAP, KeyMap, normalize_key
from .search import SEARCH_MODES, SearchPolicy
from .ui_theme import CONFIGURABLE_COLORS, ColorSpec

LOGGER = logging.getLogger(__name__)

APP_NAME = "gridwalk"
CONFIG_FILENAME = "config.json"
ICONS_FILENAME = "icons"
CONFIG_ENV = "GRIDWALK_CONFIG"
CONFIG_DIR = Path(user_config_dir(APP_NAME, appauthor=False))
DEFAULT_CONFIG_PATH = CONFIG_DIR / CONFIG_FILENAME
DEFAULT_SELECTION_MARK = "+"


@dataclass(frozen=True)
class BrowserConfig:
    """Everything the browser needs from config file, environment, and flags."""

    layout: LayoutOptions = field(default_factory=LayoutOptions)
    colors: Mapping[str, ColorSpec] = field(default_factory=dict)
    keymap: KeyMap = DEFAULT_KEYMAP
    custom_commands: tuple[CustomCommandSpec, ...] = ()
    search: SearchPolicy = field(default_factory=SearchPolicy)
    delete_grace_seconds: float = DEFAULT_GRACE_SECONDS
    editor: str = ""
    open_with: Mapping[str, str] = field(default_factory=dict)
    file_info_fields: tuple[str, ...] = ()
    selection_mark: str = DEFAULT_SELECTION_MARK
    icons_path: Path | None = None
    # View flags; the CLI overrides these.
    icons: bool = False
    dir_only: bool = False
    dirs_first: bool = False
    hide_hidden: bool = False
    preview: bool = False
    with_border: bool = False
    fuzzy: bool = False
    no_color: bool = False


def config_path(environ: Mapping[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    override = env.get(CONFIG_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_PATH


def read_config_file(path: Path) -> dict[str, object]:
    """Load the JSON object at ``path``; ``{}`` when missing or malformed."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        LOGGER.warning("cannot read config file %s: %s", path, exc)
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        LOGGER.warning("cannot parse %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        LOGGER.warning("ignoring %s: top level is not an object", path)
        return {}
    return data


def _section(data: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key!r} must be an object")
    return value


def _positive_int(section: Mapping[str, object], key: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        LOGGER.warning("layout.%s must be a positive integer, got %r", key, value)
        return default
    return value


def _parse_layout(section: Mapping[str, object]) -> LayoutOptions:
    defaults = LayoutOptions()
    separator = defaults.separator
    raw_separator = section.get("columnSeparator")
    if isinstance(raw_separator, str) and raw_separator:
        separator = " " + raw_separator[0] + "  "
    return LayoutOptions(
        max_columns=_positive_int(section, "maxColumns", defaults.max_columns),
        long_list_limit=_positive_int(section, "longListLimit", defaults.long_list_limit),
        long_list_columns=_positive_int(section, "longListColumns", defaults.long_list_columns),
        separator=separator or DEFAULT_SEPARATOR,
    )


def _parse_file_info(section: Mapping[str, object]) -> tuple[str, ...]:
    raw = section.get("fileInfo")
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = [part.strip() for part in raw.split(",")]
    if not isinstance(raw, list):
        raise ConfigError("layout.fileInfo must be a list")
    fields: list[str] = []
    for name in raw:
        if name in FILE_INFO_FIELDS:
            fields.append(name)
        else:
            LOGGER.warning("unknown layout.fileInfo field %r", name)
    return tuple(fields)


def _parse_colors(section: Mapping[str, object]) -> dict[str, ColorSpec]:
    colors: dict[str, ColorSpec] = {}
    for name, raw in section.items():
        if name not in CONFIGURABLE_COLORS:
            LOGGER.warning("unknown color %r", name)
            continue
        if not isinstance(raw, dict):
            LOGGER.warning("colors.%s must be an object with fg/bg", name)
            continue
        fg = raw.get("fg")
        bg = raw.get("bg")
        colors[name] = ColorSpec(
            fg=fg if isinstance(fg, str) else None,
            bg=bg if isinstance(bg, str) else None,
        )
    return colors


def _parse_keys(section: Mapping[str, object]) -> KeyMap:
    overrides: dict[str, list[str]] = {}
    for action, raw in section.items():
        if isinstance(raw, str):
            raw = [raw]
        if not isinstance(raw, list) or not all(isinstance(key, str) for key in raw):
            LOGGER.warning("keys.%s must be a key name or a list of key names", action)
            continue
        overrides[action] = raw
    keymap = DEFAULT_KEYMAP.with_overrides(overrides)
    unknown = set(keymap.bindings) - set(DEFAULT_KEYMAP.bindings)
    for action in sorted(unknown):
        LOGGER.warning("unknown key action %r", action)
    return keymap


def _parse_custom_commands(raw: object) -> tuple[CustomCommandSpec, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ConfigError("customCommands must be a list")
    specs: list[CustomCommandSpec] = []
    for item in raw:
        if not isinstance(item, dict):
            LOGGER.warning("skipping custom command %r: not an object", item)
            continue
        cmd = item.get("cmd")
        args = item.get("args", ARG_CURRENT_FILE)
        if not isinstance(cmd, str) or not cmd.strip():
            LOGGER.warning("skipping custom command %r: missing cmd", item)
            continue
        try:
            shlex.split(cmd)
        except ValueError as exc:
            LOGGER.warning("skipping custom command %r: %s", cmd, exc)
            continue
        if args not in ARG_TYPES:
            LOGGER.warning("skipping custom command %r: invalid args %r", cmd, args)
            continue
        key = item.get("key", "")
        specs.append(
            CustomCommandSpec(
                description=str(item.get("description", cmd)),
                cmd=cmd,
                args=args,
                key=normalize_key(key) if isinstance(key, str) and key else "",
                prompt=str(item.get("prompt", "")),
                completed_message=str(item.get("completedMessage", "")),
            )
        )
    return tuple(specs)


def _parse_search(section: Mapping[str, object]) -> SearchPolicy:
    defaults = SearchPolicy()
    mode = section.get("mode", defaults.mode)
    if mode not in SEARCH_MODES:
        LOGGER.warning("search.mode must be one of %s, got %r", ", ".join(SEARCH_MODES), mode)
        mode = defaults.mode
    timeout = section.get("timeout", defaults.timeout)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        LOGGER.warning("search.timeout must be a positive number, got %r", timeout)
        timeout = defaults.timeout
    return SearchPolicy(mode=mode, timeout=float(timeout))


def _parse_open_with(raw: object, environ: Mapping[str, str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    if isinstance(raw, dict):
        for ext, cmd in raw.items():
            if isinstance(ext, str) and isinstance(cmd, str) and cmd.strip():
                mapping[ext.lower().lstrip(".")] = cmd
    elif raw is not None:
        LOGGER.warning("openWith must be an object mapping extensions to commands")
    # Environment entries win over the file.
    mapping.update(parse_open_with(environ.get(OPEN_WITH_ENV, "")))
    return mapping


def _guarded(name: str, parse, *args):
    try:
        return parse(*args)
    except ConfigError as exc:
        LOGGER.warning("ignoring config %s: %s", name, exc)
        return None


def parse_config(data: Mapping[str, object], environ: Mapping[str, str] | None = None) -> BrowserConfig:
    """Build a ``BrowserConfig`` from decoded JSON, keeping defaults for bad parts."""
    env = os.environ if environ is None else environ
    defaults = BrowserConfig()

    layout_section = _guarded("layout", _section, data, "layout") or {}
    layout = _parse_layout(layout_section)
    file_info = _guarded("layout.fileInfo", _parse_file_info, layout_section) or ()
    selection_mark = defaults.selection_mark
    raw_mark = layout_section.get("selectionMark")
    if isinstance(raw_mark, str) and raw_mark:
        # Layout measures the mark as one column.
        if display_width(raw_mark[0]) == 1:
            selection_mark = raw_mark[0]
        else:
            LOGGER.warning("layout.selectionMark must be one column wide, got %r", raw_mark)

    colors = _parse_colors(_guarded("colors", _section, data, "colors") or {})
    keymap = _parse_keys(_guarded("keys", _section, data, "keys") or {})
    search = _parse_search(_guarded("search", _section, data, "search") or {})
    custom_commands = _guarded("customCommands", _parse_custom_commands, data.get("customCommands")) or ()

    grace = data.get("deleteGracePeriod", defaults.delete_grace_seconds)
    if isinstance(grace, bool) or not isinstance(grace, (int, float)) or grace < 0:
        LOGGER.warning("deleteGracePeriod must be a non-negative number, got %r", grace)
        grace = defaults.delete_grace_seconds

    editor = data.get("editor", "")
    if not isinstance(editor, str):
        LOGGER.warning("editor must be a string, got %r", editor)
        editor = ""

    return BrowserConfig(
        layout=layout,
        colors=colors,
        keymap=keymap,
        custom_commands=custom_commands,
        search=search,
        delete_grace_seconds=float(grace),
        editor=editor,
        open_with=_parse_open_with(data.get("openWith"), env),
        file_info_fields=file_info,
        selection_mark=selection_mark,
        icons_path=CONFIG_DIR / ICONS_FILENAME,
    )


def load_config(path: Path | None = None, environ: Mapping[str, str] | None = None) -> BrowserConfig:
    """Read the config file (``config_path()`` by default) into a ``BrowserConfig``."""
    target = path if path is not None else config_path(environ)
    LOGGER.debug("loading config from %s", target)
    return parse_config(read_config_file(target), environ)
