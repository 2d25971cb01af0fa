"""Directory listing: flat depth-first entries for the grid."""

from __future__ import annotations

from .entries import FileEntry, format_display_name
from .lister import ListOptions, Listing, find_entry_index, list_directory

__all__ = [
    "FileEntry",
    "ListOptions",
    "Listing",
    "find_entry_index",
    "format_display_name",
    "list_directory",
]
