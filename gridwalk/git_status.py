"""Git working-tree status lookup for listing colors.

``git_status`` returns porcelain two-character codes keyed by absolute path.
``build_status_overlay`` classifies them and propagates each class to every
ancestor directory, so a directory shows the status of what it contains.
Outside a repository (or when git is missing) everything is simply empty.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

GIT_TIMEOUT_SECONDS = 1.0

STATUS_UNTRACKED = "untracked"
STATUS_ADDED = "added"
STATUS_MODIFIED = "modified"
_PRIORITY = {STATUS_MODIFIED: 1, STATUS_ADDED: 2, STATUS_UNTRACKED: 3}


def _run_git(cwd: Path, args: list[str], timeout_seconds: float) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(
            ["git", "-C", str(cwd), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError):
        return None


def resolve_repo_root(path: Path, timeout_seconds: float = GIT_TIMEOUT_SECONDS) -> Path | None:
    proc = _run_git(path, ["rev-parse", "--show-toplevel"], timeout_seconds)
    if proc is None or proc.returncode != 0:
        return None
    top = proc.stdout.strip()
    if not top:
        return None
    return Path(top).resolve()


def iter_porcelain_records(output: str) -> list[tuple[str, str]]:
    """Parse ``git status --porcelain=v1 -z`` output into ``(code, path)`` pairs."""
    records: list[tuple[str, str]] = []
    tokens = output.split("\0")
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if not token:
            continue
        if len(token) < 4 or token[2] != " ":
            continue

        status = token[:2]
        records.append((status, token[3:]))

        # For renamed/copied entries, porcelain -z appends an extra token
        # containing the source path; the first path token is the destination.
        if "R" in status or "C" in status:
            index += 1

    return records


def git_status(path: Path, timeout_seconds: float = GIT_TIMEOUT_SECONDS) -> dict[Path, str]:
    """Map absolute paths to porcelain codes for the repository holding ``path``."""
    repo_root = resolve_repo_root(path, timeout_seconds)
    if repo_root is None:
        return {}
    proc = _run_git(repo_root, ["status", "--porcelain=v1", "-z"], timeout_seconds)
    if proc is None or proc.returncode != 0:
        return {}
    return {
        repo_root / rel_path.rstrip("/"): code
        for code, rel_path in iter_porcelain_records(proc.stdout)
        if rel_path and code != "!!"
    }


def classify(code: str) -> str | None:
    """Return the color class for one porcelain code."""
    if "?" in code:
        return STATUS_UNTRACKED
    if "A" in code:
        return STATUS_ADDED
    if "M" in code:
        return STATUS_MODIFIED
    return None


def build_status_overlay(status: dict[Path, str], stop_at: Path | None = None) -> dict[Path, str]:
    """Classify every path and propagate the strongest class to ancestors.

    Propagation stops after ``stop_at`` (usually the repository root).
    """
    overlay: dict[Path, str] = {}

    def merge(target: Path, kind: str) -> None:
        current = overlay.get(target)
        if current is None or _PRIORITY[kind] > _PRIORITY[current]:
            overlay[target] = kind

    for path, code in status.items():
        kind = classify(code)
        if kind is None:
            continue
        merge(path, kind)
        parent = path.parent
        while parent != parent.parent:
            merge(parent, kind)
            if stop_at is not None and parent == stop_at:
                break
            parent = parent.parent
    return overlay


def collect_status_overlay(path: Path) -> dict[Path, str]:
    """``git_status`` plus ``build_status_overlay`` for the repo around ``path``."""
    status = git_status(path)
    if not status:
        return {}
    return build_status_overlay(status, stop_at=resolve_repo_root(path))
