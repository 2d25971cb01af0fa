"""Soft delete: paths vanish from listings at once, removal waits for a grace period.

``$WALK_REMOVE_CMD`` replaces the built-in removal (for example with a
trash-can tool); it is invoked as ``[cmd, path]``.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

LOGGER = logging.getLogger(__name__)

DEFAULT_GRACE_SECONDS = 6.0
REMOVE_CMD_ENV = "WALK_REMOVE_CMD"


@dataclass(frozen=True)
class PendingDeletion:
    path: Path
    due: float


def remove_path(path: Path) -> None:
    """Remove a file, symlink, or directory tree; raises ``OSError`` on failure."""
    remove_cmd = os.environ.get(REMOVE_CMD_ENV, "").strip()
    if remove_cmd:
        proc = subprocess.run(
            [*shlex.split(remove_cmd), str(path)],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
        )
        if proc.returncode != 0:
            raise OSError(f"{remove_cmd} exited with {proc.returncode}: {proc.stderr.strip()}")
        return
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


class DeletionQueue:
    """FIFO of pending deletions; ``undo`` restores the most recent one."""

    def __init__(
        self,
        grace_seconds: float = DEFAULT_GRACE_SECONDS,
        remover: Callable[[Path], None] = remove_path,
    ) -> None:
        self.grace_seconds = grace_seconds
        self._remover = remover
        self._pending: list[PendingDeletion] = []

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        return bool(self._pending)

    @property
    def paths(self) -> frozenset[Path]:
        return frozenset(item.path for item in self._pending)

    @property
    def pending(self) -> tuple[PendingDeletion, ...]:
        return tuple(self._pending)

    def schedule(self, path: Path, now: float) -> PendingDeletion:
        item = PendingDeletion(path=path, due=now + self.grace_seconds)
        self._pending.append(item)
        return item

    def undo(self) -> PendingDeletion | None:
        if not self._pending:
            return None
        return self._pending.pop()

    def seconds_left(self, now: float) -> float:
        """Time until the newest pending deletion fires (0 when empty)."""
        if not self._pending:
            return 0.0
        return max(0.0, self._pending[-1].due - now)

    def _remove(self, items: list[PendingDeletion]) -> list[tuple[Path, OSError]]:
        failures: list[tuple[Path, OSError]] = []
        for item in items:
            try:
                self._remover(item.path)
            except OSError as exc:
                LOGGER.error("failed to delete %s: %s", item.path, exc)
                failures.append((item.path, exc))
            else:
                LOGGER.info("deleted %s", item.path)
        return failures

    def pop_due(self, now: float) -> tuple[list[Path], list[tuple[Path, OSError]]]:
        """Remove every deletion whose grace period elapsed.

        Returns ``(removed, failures)``.
        """
        due = [item for item in self._pending if item.due <= now]
        if not due:
            return [], []
        self._pending = [item for item in self._pending if item.due > now]
        failures = self._remove(due)
        failed = {path for path, _ in failures}
        return [item.path for item in due if item.path not in failed], failures

    def drain(self) -> list[tuple[Path, OSError]]:
        """Perform every pending deletion now (graceful quit)."""
        items, self._pending = self._pending, []
        return self._remove(items)

    def abandon(self) -> list[Path]:
        """Forget every pending deletion and return the paths left on disk."""
        items, self._pending = self._pending, []
        for item in items:
            LOGGER.info("not deleted (forced quit): %s", item.path)
        return [item.path for item in items]
