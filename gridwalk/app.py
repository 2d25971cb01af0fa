"""Event loop driver for the browser.

Polls the terminal size and keyboard, fires due timers, and carries out the
commands ``BrowserState.update`` returns. Child processes get the real
terminal while the TUI is suspended; their result is fed back as a
``ProcessFinished`` message.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import subprocess
import time
from collections import deque
from collections.abc import Callable, Iterable
from pathlib import Path

from .commands import (
    CopyToClipboard,
    KeyPressed,
    ProcessFinished,
    Quit,
    Resized,
    RunProcess,
    Schedule,
    copy_to_clipboard,
)
from .input import read_key
from .render import compose_frame, frame_text
from .state import BrowserState
from .terminal import TerminalController
from .ui_theme import UITheme

LOGGER = logging.getLogger(__name__)

POLL_INTERVAL_MS = 200


def run_process(argv: tuple[str, ...], completed_message: str, stdin_fd: int, stdout_fd: int) -> ProcessFinished:
    """Run ``argv`` in the foreground; stdout goes to the UI terminal, not ours."""
    LOGGER.info("running %s", argv)
    try:
        proc = subprocess.run(list(argv), stdin=stdin_fd, stdout=stdout_fd, check=False)
    except OSError as exc:
        LOGGER.error("cannot run %s: %s", argv[0], exc)
        return ProcessFinished(None, completed_message, error=f"cannot run {argv[0]}: {exc}")
    if proc.returncode != 0:
        LOGGER.warning("%s exited with status %s", argv[0], proc.returncode)
    return ProcessFinished(proc.returncode, completed_message)


class TimerQueue:
    """Delayed messages ordered by due time."""

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, object]] = []
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def push(self, due: float, message: object) -> None:
        heapq.heappush(self._heap, (due, next(self._counter), message))

    def next_due(self) -> float | None:
        return self._heap[0][0] if self._heap else None

    def pop_due(self, now: float) -> list[object]:
        due: list[object] = []
        while self._heap and self._heap[0][0] <= now:
            due.append(heapq.heappop(self._heap)[2])
        return due


class BrowserApp:
    def __init__(
        self,
        state: BrowserState,
        terminal: TerminalController,
        theme: UITheme,
        *,
        clock: Callable[[], float] = time.monotonic,
        read: Callable[[int, int | None], str] = read_key,
        clipboard: Callable[[str], bool] = copy_to_clipboard,
        home: Path | None = None,
    ) -> None:
        self.state = state
        self.terminal = terminal
        self.theme = theme
        self.timers = TimerQueue()
        self._clock = clock
        self._read = read
        self._clipboard = clipboard
        self._home = home

    def _sync_size(self) -> None:
        width, height = self.terminal.size()
        if (width, height) != (self.state.width, self.state.height):
            self.dispatch([Resized(width, height)])

    def draw(self) -> None:
        lines = compose_frame(self.state, self.theme, self._clock(), self._home)
        self.terminal.write(frame_text(lines))

    def _poll_timeout_ms(self) -> int:
        next_due = self.timers.next_due()
        if next_due is None:
            return POLL_INTERVAL_MS
        wait_ms = int((next_due - self._clock()) * 1000) + 1
        return max(0, min(POLL_INTERVAL_MS, wait_ms))

    def dispatch(self, messages: Iterable[object]) -> Quit | None:
        """Feed messages through ``update`` and execute every resulting command."""
        pending = deque(messages)
        while pending:
            commands = deque(self.state.update(pending.popleft()))
            while commands:
                command = commands.popleft()
                if isinstance(command, Quit):
                    return command
                if isinstance(command, Schedule):
                    self.timers.push(self._clock() + command.delay, command.message)
                elif isinstance(command, RunProcess):
                    with self.terminal.suspended():
                        result = run_process(
                            command.argv,
                            command.completed_message,
                            self.terminal.input_fd,
                            self.terminal.output_fd,
                        )
                    pending.append(result)
                elif isinstance(command, CopyToClipboard):
                    if not self._clipboard(command.text):
                        LOGGER.warning("no clipboard tool accepted the text")
                else:
                    LOGGER.error("unknown command %r", command)
        return None

    def run(self) -> Quit:
        """Run until a ``Quit`` command; the terminal is restored on return."""
        with self.terminal.raw_mode():
            while True:
                self._sync_size()
                self.draw()
                key = self._read(self.terminal.input_fd, self._poll_timeout_ms())
                messages: list[object] = [KeyPressed(key)] if key else []
                messages.extend(self.timers.pop_due(self._clock()))
                quit_command = self.dispatch(messages)
                if quit_command is not None:
                    return quit_command
