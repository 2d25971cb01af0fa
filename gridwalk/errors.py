"""Exception hierarchy shared by listing, layout, and config code."""

from __future__ import annotations

from pathlib import Path


class GridwalkError(Exception):
    """Base class for recoverable gridwalk failures."""


class ListError(GridwalkError):
    """Root directory of a listing could not be read."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"cannot list {path}: {reason}")
        self.path = path
        self.reason = reason


class LayoutError(GridwalkError):
    """Grid layout failed to converge within its iteration cap."""


class ConfigError(GridwalkError):
    """Config value has the wrong shape and cannot be applied."""
