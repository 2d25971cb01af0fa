"""Browser state and its single update entry point.

``BrowserState.update(message)`` is the only way state changes. It returns a
list of commands (``Quit``, ``RunProcess``, ``Schedule``, ``CopyToClipboard``)
for the driver to carry out; results come back as further messages.

The cursor is a flat index into ``listing.entries``. Grid cells are derived
from it on demand, so resizing only recomputes the layout and offset.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from .commands import (
    CopyToClipboard,
    CustomCommandSpec,
    DeletionTick,
    KeyPressed,
    ProcessFinished,
    Quit,
    Resized,
    RunProcess,
    Schedule,
    SearchExpired,
    editor_argv,
    resolve_command_args,
)
from .config import BrowserConfig
from .deletion import DeletionQueue
from .errors import LayoutError, ListError
from .git_status import collect_status_overlay
from .grid import GridLayout, compute_grid
from .icons import load_icon_map
from .keymap import MOVE_ACTIONS, KeyComboBinding, KeyComboRegistry
from .listing import FileEntry, ListOptions, Listing, find_entry_index, list_directory
from .navigation import apply_move, cell_of, clamp_index
from .preview import Preview, build_preview
from .search import SearchPolicy, TypeAheadSearch, fuzzy_find
from .viewport import PositionMemory, update_offset

LOGGER = logging.getLogger(__name__)

# Location bar and status bar.
CHROME_ROWS = 2
PREVIEW_GAP = 1

EXIT_OK = 0
EXIT_FORCED = 2

Command = object


@dataclass
class PromptState:
    """Inline text input collecting the argument of an ``input`` command."""

    command: CustomCommandSpec
    text: str = ""


class BrowserState:
    def __init__(
        self,
        config: BrowserConfig,
        path: Path,
        width: int,
        height: int,
        *,
        clock: Callable[[], float] = time.monotonic,
        lister: Callable[..., Listing] = list_directory,
        git_provider: Callable[[Path], dict[Path, str]] = collect_status_overlay,
        previewer: Callable[..., Preview] = build_preview,
        deletions: DeletionQueue | None = None,
    ) -> None:
        self.config = config
        self.path = path
        self.width = max(1, width)
        self.height = max(1, height)
        self._clock = clock
        self._lister = lister
        self._git_provider = git_provider
        self._previewer = previewer

        self.listing = Listing(entries=[])
        self.layout = GridLayout.empty()
        self.index = 0
        self.offset = 0
        self.open_dirs: set[Path] = set()
        self.selected: set[Path] = set()
        self.positions = PositionMemory()
        self.search = TypeAheadSearch(config.search or SearchPolicy())
        self.deletions = deletions if deletions is not None else DeletionQueue(config.delete_grace_seconds)
        self.hide_hidden = config.hide_hidden
        self.preview_visible = config.preview
        self.show_help = False
        self.status_message = ""
        self.list_error = ""
        self.prompt: PromptState | None = None
        self.menu_index: int | None = None
        self.git_overlay: dict[Path, str] = {}
        self._preview_cache: tuple[tuple[Path, int, int], Preview] | None = None

        self._icons = load_icon_map(config.icons_path) if config.icons else None
        self._registry = self._build_registry()

        # A bad start directory is fatal: let ListError propagate.
        self.listing = self._list(self.path)
        self._refresh_git()
        self._relayout()
        if config.fuzzy:
            self.search.open(self._clock())

    # Derived geometry

    @property
    def grid_height(self) -> int:
        return max(1, self.height - CHROME_ROWS)

    @property
    def preview_width(self) -> int:
        if not self.preview_visible:
            return 0
        return self.width // 2

    @property
    def listing_width(self) -> int:
        if not self.preview_visible:
            return self.width
        return max(1, self.width - self.preview_width - PREVIEW_GAP)

    @property
    def entries(self) -> list[FileEntry]:
        return self.listing.entries

    @property
    def current_entry(self) -> FileEntry | None:
        if not self.entries:
            return None
        return self.entries[clamp_index(self.index, len(self.entries))]

    @property
    def current_path(self) -> Path | None:
        entry = self.current_entry
        return entry.path if entry is not None else None

    @property
    def cursor_cell(self) -> tuple[int, int]:
        return cell_of(self.index, self.layout.rows)

    def selected_paths(self) -> list[Path]:
        """Selected entries of the current listing, in listing order."""
        return [entry.path for entry in self.entries if entry.path in self.selected]

    # Listing and layout

    def _list_options(self) -> ListOptions:
        return ListOptions(
            hide_hidden=self.hide_hidden,
            dir_only=self.config.dir_only,
            dirs_first=self.config.dirs_first,
            icons=self._icons,
            file_info_fields=self.config.file_info_fields,
            selection_mark=self.config.selection_mark,
        )

    def _list(self, root: Path, open_dirs: set[Path] | None = None) -> Listing:
        return self._lister(
            root,
            frozenset(self.open_dirs if open_dirs is None else open_dirs),
            self._list_options(),
            self.deletions.paths,
        )

    def _refresh_git(self) -> None:
        self.git_overlay = self._git_provider(self.path)

    def _relayout(self) -> None:
        widths = [entry.display_width for entry in self.entries]
        try:
            self.layout = compute_grid(widths, self.listing_width, self.grid_height, self.config.layout)
        except LayoutError as exc:
            LOGGER.error("%s; falling back to one column", exc)
            self.layout = GridLayout(1, len(widths), (max(widths, default=0),), len(widths))
        self.index = clamp_index(self.index, len(self.entries))
        self._update_offset()

    def _update_offset(self) -> None:
        row = cell_of(self.index, self.layout.rows)[1]
        self.offset = update_offset(row, self.offset, self.grid_height, self.layout.rows)
        self._save_position()

    def _save_position(self) -> None:
        self.positions.save(self.path, self.index, self.offset)

    def _list_failed(self, exc: ListError) -> None:
        LOGGER.warning("%s", exc)
        self.list_error = str(exc)

    def relist(self, target: Path | str | None = None) -> bool:
        """Re-read the current directory, optionally moving the cursor to ``target``.

        On ``ListError`` the previous listing stays and ``list_error`` is set;
        the renderer shows it in place of the grid until a listing succeeds.
        """
        try:
            listing = self._list(self.path)
        except ListError as exc:
            self._list_failed(exc)
            return False
        self.list_error = ""
        self.listing = listing
        if target is not None:
            self.index = find_entry_index(self.entries, target)
        self._relayout()
        return True

    def enter_directory(self, new_path: Path) -> bool:
        """Browse ``new_path``, restoring its remembered cursor position."""
        try:
            listing = self._list(new_path, open_dirs=set())
        except ListError as exc:
            self._list_failed(exc)
            return False

        is_direct_subdir = new_path.parent == self.path
        self._save_position()
        self.path = new_path
        self.listing = listing
        self.list_error = ""
        self.open_dirs.clear()
        if not is_direct_subdir:
            # Remembered positions are relative to the old tree shape.
            self.positions.clear()
        remembered = self.positions.get(new_path)
        if remembered is not None:
            self.index, self.offset = remembered.index, remembered.offset
        else:
            self.index, self.offset = 0, 0
        self.search.close()
        self._refresh_git()
        self._relayout()
        return True

    def exit_directory(self) -> bool:
        """Go to the parent directory with the cursor on the one just left."""
        old_path = self.path
        parent = old_path.parent
        if parent == old_path:
            return False
        try:
            listing = self._list(parent, open_dirs=set())
        except ListError as exc:
            self._list_failed(exc)
            return False

        self._save_position()
        self.path = parent
        self.listing = listing
        self.list_error = ""
        self.open_dirs.clear()
        remembered = self.positions.get(parent)
        if remembered is not None:
            self.index, self.offset = remembered.index, remembered.offset
        else:
            self.index = find_entry_index(self.entries, old_path)
            self.offset = 0
        self.search.close()
        self._refresh_git()
        self._relayout()
        return True

    # Update

    def update(self, message: object) -> list[Command]:
        if isinstance(message, KeyPressed):
            return self._handle_key(message.key)
        if isinstance(message, Resized):
            self.width = max(1, message.width)
            self.height = max(1, message.height)
            self._relayout()
            return []
        if isinstance(message, SearchExpired):
            self.search.expire(message.search_id)
            return []
        if isinstance(message, DeletionTick):
            return self._handle_deletion_tick()
        if isinstance(message, ProcessFinished):
            return self._handle_process_finished(message)
        LOGGER.debug("ignoring unknown message %r", message)
        return []

    def _handle_deletion_tick(self) -> list[Command]:
        now = self._clock()
        _removed, failures = self.deletions.pop_due(now)
        if failures:
            path, exc = failures[0]
            self.status_message = f"cannot delete {path.name}: {exc}"
            # Failed removals are back on disk and visible again.
            self.relist(self.current_path)
        if not self.deletions:
            self._refresh_git()
        return []

    def _handle_process_finished(self, message: ProcessFinished) -> list[Command]:
        if message.error:
            self.status_message = message.error
        elif not message.ok:
            self.status_message = f"command exited with status {message.returncode}"
        elif message.completed_message:
            self.status_message = message.completed_message
        # The command may have created, renamed or removed files.
        self.relist(self.current_path)
        self._refresh_git()
        self._preview_cache = None
        return []

    def _handle_key(self, key: str) -> list[Command]:
        if not key:
            return []
        if key == "CTRL_C" and (self.prompt is not None or self.menu_index is not None):
            return self._action_force_quit()
        if self.prompt is not None:
            return self._handle_prompt_key(key)
        if self.menu_index is not None:
            return self._handle_menu_key(key)
        if self.show_help:
            self.show_help = False
            return []

        self.status_message = ""

        if self.search.active:
            handled, commands = self._handle_search_key(key)
            if handled:
                return commands

        result = self._registry.dispatch(key)
        return list(result) if result else []

    def _handle_search_key(self, key: str) -> tuple[bool, list[Command]]:
        now = self._clock()
        if key == "ESC":
            self.search.close()
            return True, []
        if key == "ENTER":
            self.search.close()
            return False, []
        if key == "BACKSPACE":
            self._apply_search(self.search.backspace(now))
            return True, []
        if len(key) == 1 and key.isprintable():
            self._apply_search(self.search.type(key, now))
            if self.search.policy.expires:
                return True, [Schedule(self.search.policy.timeout, SearchExpired(self.search.search_id))]
            return True, []
        if self.search.policy.expires:
            self.search.close()
        return False, []

    def _apply_search(self, query: str) -> None:
        match = fuzzy_find(query, [entry.name for entry in self.entries])
        if match is None:
            self.search.matched_positions = ()
            return
        self.search.matched_positions = match.positions
        self.index = match.index
        self._update_offset()

    def _handle_prompt_key(self, key: str) -> list[Command]:
        prompt = self.prompt
        assert prompt is not None
        if key == "ESC":
            self.prompt = None
            return []
        if key == "ENTER":
            self.prompt = None
            args = resolve_command_args(
                prompt.command,
                current_dir=self.path,
                current_file=self.current_path,
                selected=self.selected_paths(),
                input_text=prompt.text,
            )
            if args is None:
                return []
            return self._run_process(prompt.command, args)
        if key == "BACKSPACE":
            prompt.text = prompt.text[:-1]
        elif len(key) == 1 and key.isprintable():
            prompt.text += key
        return []

    def _handle_menu_key(self, key: str) -> list[Command]:
        commands = self.config.custom_commands
        assert self.menu_index is not None
        if key in ("ESC", "q", "F2"):
            self.menu_index = None
        elif key in ("UP", "k"):
            self.menu_index = (self.menu_index - 1) % len(commands)
        elif key in ("DOWN", "j"):
            self.menu_index = (self.menu_index + 1) % len(commands)
        elif key == "ENTER":
            spec = commands[self.menu_index]
            self.menu_index = None
            return self._run_custom(spec)
        return []

    # Key bindings

    def _build_registry(self) -> KeyComboRegistry:
        registry = KeyComboRegistry()
        for action, keys in self.config.keymap.bindings.items():
            if action in MOVE_ACTIONS:
                handler = partial(self._move, action)
            else:
                handler = getattr(self, f"_action_{action}", None)
                if handler is None:
                    LOGGER.warning("no handler for key action %r", action)
                    continue
            registry.register_binding(KeyComboBinding(tuple(keys), handler))
        for spec in self.config.custom_commands:
            if not spec.key:
                continue
            if spec.key in registry:
                LOGGER.info("custom command %r overrides key %r", spec.description, spec.key)
            registry.register_binding(KeyComboBinding((spec.key,), partial(self._run_custom, spec)))
        return registry

    def _move(self, name: str) -> list[Command]:
        self.index = apply_move(name, self.index, self.layout)
        self._update_offset()
        return []

    def _action_open(self) -> list[Command]:
        entry = self.current_entry
        if entry is None:
            return []
        if entry.is_dir:
            self.enter_directory(entry.path)
            return []
        argv = editor_argv(entry.path, editor=self.config.editor, open_with=self.config.open_with)
        return [RunProcess(argv)]

    def _action_back(self) -> list[Command]:
        self.exit_directory()
        return []

    def _action_up_dir(self) -> list[Command]:
        entry = self.current_entry
        if entry is None or entry.tree_depth == 0:
            self.exit_directory()
            return []
        # Inside an expanded tree: jump to the directory holding the entry.
        self.index = find_entry_index(self.entries, entry.dir_path)
        self._update_offset()
        return []

    def _action_open_dir(self) -> list[Command]:
        entry = self.current_entry
        if entry is not None and entry.is_dir:
            self.enter_directory(entry.path)
        return []

    def _action_open_tree(self) -> list[Command]:
        entry = self.current_entry
        if entry is None or not entry.is_dir:
            return []
        self.open_dirs.add(entry.path)
        self.relist(entry.path)
        return []

    def _action_close_tree(self) -> list[Command]:
        entry = self.current_entry
        if entry is None:
            return []
        if entry.path in self.open_dirs:
            self.open_dirs.discard(entry.path)
            self.relist(entry.path)
            return []
        parent = entry.dir_path
        if parent == self.path:
            return []
        # The cursor entry disappears with its parent collapsed; land on the parent.
        self.open_dirs.discard(parent)
        self.relist(parent)
        return []

    def _action_select(self) -> list[Command]:
        entry = self.current_entry
        if entry is None:
            return []
        if entry.path in self.selected:
            self.selected.discard(entry.path)
        else:
            self.selected.add(entry.path)
        return self._move("down")

    def _action_preview(self) -> list[Command]:
        self.preview_visible = not self.preview_visible
        self._relayout()
        return []

    def _action_search(self) -> list[Command]:
        self.search.open(self._clock())
        return []

    def _action_delete(self) -> list[Command]:
        entry = self.current_entry
        if entry is None:
            return []
        self.deletions.schedule(entry.path, self._clock())
        self.selected.discard(entry.path)
        self.open_dirs.discard(entry.path)
        self.relist()
        return [Schedule(self.deletions.grace_seconds, DeletionTick())]

    def _action_undo(self) -> list[Command]:
        item = self.deletions.undo()
        if item is None:
            return []
        if not self.relist(self.current_path):
            return []
        # Only follow the restored entry when it is part of this listing.
        for index, entry in enumerate(self.entries):
            if entry.path == item.path:
                self.index = index
                self._update_offset()
                break
        return []

    def _action_yank(self) -> list[Command]:
        target = self.current_path or self.path
        self.status_message = f"Copied {target}"
        return [CopyToClipboard(str(target))]

    def _action_toggle_hidden(self) -> list[Command]:
        self.hide_hidden = not self.hide_hidden
        self.relist(self.current_path)
        return []

    def _action_help(self) -> list[Command]:
        self.show_help = True
        return []

    def _action_command_menu(self) -> list[Command]:
        if not self.config.custom_commands:
            self.status_message = "No custom commands configured"
            return []
        self.menu_index = 0
        return []

    def _action_quit(self) -> list[Command]:
        return [Quit(EXIT_OK, self.path)]

    def _action_force_quit(self) -> list[Command]:
        return [Quit(EXIT_FORCED, None)]

    def _run_custom(self, spec: CustomCommandSpec) -> list[Command]:
        if spec.wants_input:
            self.prompt = PromptState(spec)
            return []
        args = resolve_command_args(
            spec,
            current_dir=self.path,
            current_file=self.current_path,
            selected=self.selected_paths(),
        )
        if args is None:
            self.status_message = f"{spec.description}: nothing to run on"
            return []
        return self._run_process(spec, args)

    def _run_process(self, spec: CustomCommandSpec, args: tuple[str, ...]) -> list[Command]:
        try:
            argv = spec.argv(*args)
        except ValueError as exc:
            LOGGER.warning("cannot parse command %r: %s", spec.cmd, exc)
            self.status_message = f"{spec.description}: {exc}"
            return []
        return [RunProcess(argv, spec.completed_message)]

    # Preview

    def preview(self, width: int, height: int) -> Preview | None:
        """Preview of the entry under the cursor, cached per path and size."""
        path = self.current_path
        if path is None or width <= 0 or height <= 0:
            return None
        key = (path, width, height)
        if self._preview_cache is not None and self._preview_cache[0] == key:
            return self._preview_cache[1]
        preview = self._previewer(
            path,
            width,
            height,
            hide_hidden=self.hide_hidden,
            color=not self.config.no_color,
        )
        self._preview_cache = (key, preview)
        return preview
