"""Command-line front door for gridwalk.

Parses options, resolves the start directory, loads config, and runs the
browser on the controlling terminal. The UI is drawn on stderr; on a normal
quit the final directory is printed on stdout so ``cd "$(gridwalk)"`` works.
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import os
import sys
import termios
from dataclasses import replace
from pathlib import Path

from . import __version__
from .app import BrowserApp
from .config import BrowserConfig, load_config
from .errors import ListError
from .keymap import DEFAULT_KEYMAP
from .logs import configure_logging
from .render import help_lines
from .state import EXIT_OK, BrowserState
from .terminal import TerminalController
from .ui_theme import build_theme

LOGGER = logging.getLogger(__name__)

FLAG_NAMES = ("icons", "dir_only", "dirs_first", "hide_hidden", "preview", "with_border", "fuzzy", "no_color")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gridwalk",
        description="Browse directories in a multi-column terminal grid; prints the final directory on exit.",
        epilog="keys:\n" + "\n".join(help_lines(DEFAULT_KEYMAP)),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to start in. Defaults to current directory.")
    parser.add_argument("--icons", action="store_true", help="Display file icons.")
    parser.add_argument("--dir-only", action="store_true", help="Show directories only.")
    parser.add_argument("--dirs-first", action="store_true", help="List directories before files.")
    parser.add_argument("--hide-hidden", action="store_true", help="Hide dotfiles.")
    parser.add_argument("--preview", action="store_true", help="Start with the preview pane open.")
    parser.add_argument("--with-border", action="store_true", help="Draw a border around the preview.")
    parser.add_argument("--fuzzy", action="store_true", help="Start in fuzzy search mode.")
    parser.add_argument("--no-color", action="store_true", help="Disable colors.")
    parser.add_argument("--version", action="version", version=f"gridwalk {__version__}")
    return parser


def resolve_start_path(raw: str | None) -> Path:
    """Absolute start directory; raises ``SystemExit`` when unusable."""
    if raw is None:
        try:
            return Path.cwd()
        except OSError as exc:
            raise SystemExit(f"Cannot resolve working directory: {exc}") from exc
    path = Path(raw).expanduser()
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")
    if not path.is_dir():
        raise SystemExit(f"Not a directory: {path}")
    return path.resolve()


def apply_flags(config: BrowserConfig, args: argparse.Namespace) -> BrowserConfig:
    """Flags switch features on; they never switch off what the config enabled."""
    changes = {name: True for name in FLAG_NAMES if getattr(args, name)}
    return replace(config, **changes) if changes else config


@contextlib.contextmanager
def _controlling_tty():
    """Yield ``(input_fd, output_fd)`` for the UI, opening ``/dev/tty`` when stdin is redirected."""
    if sys.stdin.isatty():
        yield sys.stdin.fileno(), sys.stderr.fileno()
        return
    try:
        fd = os.open("/dev/tty", os.O_RDWR)
    except OSError as exc:
        raise SystemExit(f"gridwalk needs a terminal: {exc}") from exc
    try:
        yield fd, fd
    finally:
        os.close(fd)


def report_deletions(state: BrowserState, exit_code: int) -> None:
    """Finish or abandon pending deletions and tell the user about leftovers."""
    if exit_code == EXIT_OK:
        for path, exc in state.deletions.drain():
            print(f"gridwalk: cannot delete {path}: {exc}", file=sys.stderr)
        return
    for path in state.deletions.abandon():
        print(f"gridwalk: not deleted: {path}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    path = resolve_start_path(args.path)

    configure_logging()
    config = apply_flags(load_config(), args)
    theme = build_theme(config.colors, no_color=config.no_color)
    LOGGER.info("starting in %s", path)

    with _controlling_tty() as (input_fd, output_fd):
        try:
            terminal = TerminalController(input_fd, output_fd)
        except termios.error as exc:
            raise SystemExit(f"gridwalk needs a terminal: {exc}") from exc
        width, height = terminal.size()
        try:
            state = BrowserState(config, path, width, height)
        except ListError as exc:
            raise SystemExit(str(exc)) from exc
        result = BrowserApp(state, terminal, theme).run()

    report_deletions(state, result.exit_code)
    if result.exit_code == EXIT_OK and result.output_path is not None:
        print(result.output_path)
    LOGGER.info("exit %d", result.exit_code)
    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
