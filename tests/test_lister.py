"""Directory lister: ordering, filters, tree expansion, and failures."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from gridwalk.errors import ListError
from gridwalk.icons import IconMap
from gridwalk.listing import ListOptions, find_entry_index, format_display_name, list_directory
from gridwalk.listing.entries import FileEntry
from gridwalk.listing.lister import _scan


def _make_tree(root: Path) -> None:
    (root / "a_dir").mkdir()
    (root / "c_dir").mkdir()
    (root / "c_dir" / "inner.txt").write_text("inner", encoding="utf-8")
    (root / "b.txt").write_text("bee", encoding="utf-8")
    (root / ".hidden").write_text("secret", encoding="utf-8")
    script = root / "run.sh"
    script.write_text("#!/bin/sh\n", encoding="utf-8")
    script.chmod(0o755)


def _names(listing) -> list[str]:
    return [entry.name for entry in listing.entries]


class ListDirectoryTests(unittest.TestCase):
    def test_entries_sorted_by_name_with_kind_suffixes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _make_tree(root)

            listing = list_directory(root)

            self.assertEqual(_names(listing), [".hidden", "a_dir", "b.txt", "c_dir", "run.sh"])
            by_name = {entry.name: entry for entry in listing.entries}
            self.assertEqual(by_name["a_dir"].suffix, "/")
            self.assertEqual(by_name["run.sh"].suffix, "*")
            self.assertEqual(by_name["b.txt"].suffix, "")
            self.assertEqual(by_name["a_dir"].display_name, "  a_dir/")
            self.assertEqual(by_name["a_dir"].display_width, len("  a_dir/"))
            self.assertEqual(len(listing), 5)

    def test_symlink_gets_link_suffix(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "target.txt").write_text("x", encoding="utf-8")
            os.symlink(root / "target.txt", root / "link")

            entries = {entry.name: entry for entry in list_directory(root).entries}

            self.assertTrue(entries["link"].is_symlink)
            self.assertEqual(entries["link"].suffix, "@")

    def test_filters_and_dirs_first(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _make_tree(root)

            hidden = list_directory(root, options=ListOptions(hide_hidden=True))
            dirs = list_directory(root, options=ListOptions(dir_only=True))
            grouped = list_directory(root, options=ListOptions(dirs_first=True))

            self.assertNotIn(".hidden", _names(hidden))
            self.assertEqual(_names(dirs), ["a_dir", "c_dir"])
            self.assertEqual(_names(grouped), ["a_dir", "c_dir", ".hidden", "b.txt", "run.sh"])

    def test_open_directory_children_follow_parent_one_level_deeper(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _make_tree(root)

            listing = list_directory(root, frozenset({root / "c_dir"}))

            names = _names(listing)
            self.assertEqual(names.index("inner.txt"), names.index("c_dir") + 1)
            inner = listing.entries[names.index("inner.txt")]
            self.assertEqual(inner.tree_depth, 1)
            self.assertEqual(inner.dir_path, root / "c_dir")
            self.assertEqual(inner.path, root / "c_dir" / "inner.txt")
            self.assertTrue(inner.display_name.endswith("    inner.txt"))

    def test_hidden_paths_are_excluded(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _make_tree(root)

            listing = list_directory(root, hidden_paths=frozenset({root / "b.txt"}))

            self.assertNotIn("b.txt", _names(listing))

    def test_unreadable_open_subdirectory_contributes_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _make_tree(root)
            blocked = root / "c_dir"

            def scan(directory: Path):
                if directory == blocked:
                    raise PermissionError(13, "Permission denied", str(directory))
                return _scan(directory)

            listing = list_directory(root, frozenset({blocked}), scan=scan)

            self.assertIn("c_dir", _names(listing))
            self.assertNotIn("inner.txt", _names(listing))

    def test_unreadable_root_raises_list_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "missing"

            with self.assertRaises(ListError) as ctx:
                list_directory(missing)

            self.assertEqual(ctx.exception.path, missing)
            self.assertIn(str(missing), str(ctx.exception))

    def test_icons_and_briefs_are_part_of_display_name(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "sub").mkdir()
            (root / "f.txt").write_text("12345", encoding="utf-8")
            options = ListOptions(
                icons=IconMap.from_pairs([("di", "D"), ("fi", "F")]),
                file_info_fields=("size",),
            )

            entries = {entry.name: entry for entry in list_directory(root, options=options).entries}

            self.assertEqual(entries["sub"].icon, "D")
            self.assertEqual(entries["f.txt"].icon, "F")
            self.assertEqual(entries["f.txt"].brief, "     5B")
            self.assertEqual(entries["f.txt"].display_name, "     5B   F f.txt")

    def test_find_entry_index_by_path_and_name(self) -> None:
        base = Path("/base")
        entries = [FileEntry(base, "a"), FileEntry(base, "b"), FileEntry(base / "b", "c", tree_depth=1)]

        self.assertEqual(find_entry_index(entries, base / "b" / "c"), 2)
        self.assertEqual(find_entry_index(entries, "b"), 1)
        self.assertEqual(find_entry_index(entries, base / "zzz"), 0)
        self.assertEqual(find_entry_index(entries, "zzz"), 0)


class DisplayNameTests(unittest.TestCase):
    def test_selection_mark_replaces_leading_blank(self) -> None:
        entry = FileEntry(Path("/x"), "notes.md")

        self.assertEqual(format_display_name(entry), "  notes.md")
        self.assertEqual(format_display_name(entry, selected=True), "+ notes.md")
        self.assertEqual(format_display_name(entry, selected=True, selection_mark="*"), "* notes.md")

    def test_tree_depth_indents_name(self) -> None:
        entry = FileEntry(Path("/x/y"), "deep", tree_depth=2, is_dir=True)

        self.assertEqual(format_display_name(entry), "  " + " " * 8 + "deep/")


if __name__ == "__main__":
    unittest.main()
