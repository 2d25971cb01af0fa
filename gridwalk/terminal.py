"""Terminal control helpers for the TUI session.

Owns the raw-mode lifecycle and alternate-screen switching. The UI is written
to stderr so stdout stays free for the path printed on exit.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

ENTER_TUI = b"\x1b[?1049h\x1b[?25l"
LEAVE_TUI = b"\x1b[?25h\x1b[?1049l"
FALLBACK_SIZE = (80, 24)


class TerminalController:
    """Manage terminal mode transitions for one input/output fd pair."""

    def __init__(self, input_fd: int, output_fd: int) -> None:
        self.input_fd = input_fd
        self.output_fd = output_fd
        self._saved_tty_state = termios.tcgetattr(input_fd)
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def enable_tui_mode(self) -> None:
        tty.setraw(self.input_fd, termios.TCSAFLUSH)
        # Enter alternate screen and hide cursor.
        os.write(self.output_fd, ENTER_TUI)
        self._active = True

    def disable_tui_mode(self) -> None:
        # Show cursor and restore the main screen buffer.
        os.write(self.output_fd, LEAVE_TUI)
        self._active = False
        termios.tcsetattr(self.input_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def size(self) -> tuple[int, int]:
        """Return ``(columns, lines)`` of the UI terminal."""
        try:
            size = os.get_terminal_size(self.output_fd)
        except OSError:
            return tuple(shutil.get_terminal_size(FALLBACK_SIZE))
        return size.columns, size.lines

    def write(self, data: str) -> None:
        os.write(self.output_fd, data.encode("utf-8", errors="replace"))

    @contextlib.contextmanager
    def raw_mode(self):
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()

    @contextlib.contextmanager
    def suspended(self):
        """Hand the terminal back to a child process, then re-enter TUI mode."""
        self.disable_tui_mode()
        try:
            yield
        finally:
            self.enable_tui_mode()
