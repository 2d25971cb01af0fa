"""Frame composition: location bar, grid cells, preview pane, status bar."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from gridwalk.ansi import display_width, strip_ansi
from gridwalk.commands import CustomCommandSpec, KeyPressed
from gridwalk.config import BrowserConfig
from gridwalk.errors import ListError
from gridwalk.keymap import DEFAULT_KEYMAP
from gridwalk.listing import list_directory
from gridwalk.preview import Preview
from gridwalk.render import (
    compose_frame,
    frame_text,
    grid_lines,
    help_lines,
    location_text,
    status_text,
)
from gridwalk.state import BrowserState
from gridwalk.ui_theme import DEFAULT_THEME, PLAIN_THEME


class LocationTextTests(unittest.TestCase):
    def test_home_is_shortened(self) -> None:
        home = Path("/home/u")

        self.assertEqual(location_text(Path("/home/u/proj"), 80, home), "~/proj")
        self.assertEqual(location_text(Path("/home/u"), 80, home), "~")
        self.assertEqual(location_text(Path("/home/user2"), 80, home), "/home/user2")
        self.assertEqual(location_text(Path("/etc"), 80, home), "/etc")

    def test_long_path_keeps_its_tail(self) -> None:
        self.assertEqual(location_text(Path("/usr/local/bin"), 4, Path("/home/u")), "/bin")


class HelpLinesTests(unittest.TestCase):
    def test_lists_keys_and_custom_commands(self) -> None:
        lines = help_lines(DEFAULT_KEYMAP, (CustomCommandSpec("Make dir", "mkdir", key="CTRL_N"),))
        plain = [line.split() for line in lines]

        self.assertIn(["esc,", "q", "Exit", "with", "cd"], plain)
        self.assertIn(["ctrl+n", "Make", "dir"], plain)


class FrameTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        self.clock = mock.Mock(return_value=0.0)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def make_state(self, config: BrowserConfig | None = None, width: int = 60, height: int = 8, **kwargs) -> BrowserState:
        kwargs.setdefault("git_provider", lambda _path: {})
        return BrowserState(config or BrowserConfig(), self.root, width, height, clock=self.clock, **kwargs)

    def test_frame_fills_screen_with_bars(self) -> None:
        for name in ("alpha", "beta", "gamma"):
            (self.root / name).write_text(name, encoding="utf-8")
        state = self.make_state()

        lines = compose_frame(state, PLAIN_THEME, 0.0, home=Path("/nonexistent-home"))

        self.assertEqual(len(lines), 8)
        self.assertEqual(lines[0].rstrip(), str(self.root)[-60:])
        self.assertTrue(lines[-1].rstrip().endswith("alpha"))
        for line in lines:
            self.assertLessEqual(display_width(line), 60)
        body = "\n".join(lines[1:-1])
        for name in ("alpha", "beta", "gamma"):
            self.assertIn(name, body)

    def test_empty_directory_says_so(self) -> None:
        state = self.make_state()

        self.assertEqual(grid_lines(state, PLAIN_THEME), ["No files"])
        self.assertEqual(status_text(state, 0.0), ("", "bar"))

    def test_listing_error_replaces_grid_while_deletion_pending(self) -> None:
        blocked = self.root / "blocked"
        blocked.mkdir()
        (self.root / "other.txt").write_text("x", encoding="utf-8")

        def lister(root, open_dirs, options, hidden_paths):
            if root == blocked:
                raise ListError(root, "Permission denied")
            return list_directory(root, open_dirs, options, hidden_paths)

        state = self.make_state(lister=lister)
        state.update(KeyPressed("j"))
        state.update(KeyPressed("d"))
        state.update(KeyPressed("ENTER"))

        message = f"cannot list {blocked}: Permission denied"
        self.assertEqual(grid_lines(state, PLAIN_THEME), [message[:60]])
        self.assertEqual(grid_lines(state, DEFAULT_THEME)[0], f"{DEFAULT_THEME.danger}{message[:60]}{DEFAULT_THEME.reset}")
        self.assertEqual(status_text(state, 0.0)[1], "danger")

    def test_cursor_cell_uses_cursor_style(self) -> None:
        (self.root / "alpha").write_text("a", encoding="utf-8")
        (self.root / "beta").write_text("b", encoding="utf-8")
        state = self.make_state()

        lines = grid_lines(state, DEFAULT_THEME)

        self.assertTrue(lines[0].startswith(DEFAULT_THEME.cursor))
        self.assertNotIn(DEFAULT_THEME.cursor, lines[1])

    def test_search_matches_are_underlined(self) -> None:
        (self.root / "alpha").write_text("a", encoding="utf-8")
        state = self.make_state()
        state.update(KeyPressed("/"))
        state.update(KeyPressed("l"))

        line = grid_lines(state, DEFAULT_THEME)[0]

        self.assertIn(f"{DEFAULT_THEME.match}l{DEFAULT_THEME.reset}", line)
        self.assertEqual(status_text(state, 0.0), ("/l", "search"))

    def test_status_shows_deletion_countdown_then_prompt(self) -> None:
        (self.root / "a.txt").write_text("a", encoding="utf-8")
        (self.root / "b.txt").write_text("b", encoding="utf-8")
        spec = CustomCommandSpec("Mkdir", "mkdir", args="input", key="n", prompt="Dir: ")
        state = self.make_state(BrowserConfig(custom_commands=(spec,)))
        state.update(KeyPressed("j"))
        state.update(KeyPressed("d"))

        self.assertEqual(status_text(state, 0.0), ("Deleted: b.txt (u to undo, 6s)", "danger"))
        self.assertEqual(status_text(state, 4.5), ("Deleted: b.txt (u to undo, 2s)", "danger"))

        state.update(KeyPressed("n"))
        state.update(KeyPressed("x"))
        self.assertEqual(status_text(state, 0.0), ("Dir: x█", "bar"))

    def test_preview_pane_with_border(self) -> None:
        (self.root / "alpha").write_text("a", encoding="utf-8")
        previewer = mock.Mock(return_value=Preview("text", ("preview body",)))
        state = self.make_state(BrowserConfig(preview=True, with_border=True), previewer=previewer)

        lines = compose_frame(state, PLAIN_THEME, 0.0)
        body = [strip_ansi(line) for line in lines[1:-1]]

        self.assertTrue(body[0].endswith("┐"))
        self.assertIn("┌", body[0])
        self.assertIn("│preview body", body[1])
        self.assertIn("└", body[-1])
        previewer.assert_called_once()
        _path, width, height = previewer.call_args.args
        self.assertEqual((width, height), (28, 4))

    def test_help_screen_replaces_grid(self) -> None:
        (self.root / "alpha").write_text("a", encoding="utf-8")
        state = self.make_state(height=40)
        state.update(KeyPressed("?"))

        body = compose_frame(state, PLAIN_THEME, 0.0)[1:-1]

        self.assertTrue(any("Toggle preview" in line for line in body))
        self.assertFalse(any("alpha" in line for line in body))

    def test_frame_text_homes_cursor_and_clears_lines(self) -> None:
        self.assertEqual(frame_text(["a", "b"]), "\033[Ha\033[K\r\nb\033[K")


if __name__ == "__main__":
    unittest.main()
