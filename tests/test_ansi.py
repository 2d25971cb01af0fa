from __future__ import annotations

import unittest

from gridwalk.ansi import clip_ansi_line, clip_left, display_width, pad_to_width, strip_ansi


class AnsiTests(unittest.TestCase):
    def test_display_width_ignores_escapes_and_counts_wide_chars(self) -> None:
        self.assertEqual(display_width("\033[31mred\033[0m"), 3)
        self.assertEqual(display_width("漢字"), 4)
        self.assertEqual(display_width("é"), 1)
        self.assertEqual(display_width("a\tb"), 9)

    def test_strip_ansi(self) -> None:
        self.assertEqual(strip_ansi("\033[1;38;2;1;2;3mhi\033[0m"), "hi")

    def test_pad_to_width(self) -> None:
        self.assertEqual(pad_to_width("ab", 4), "ab  ")
        self.assertEqual(pad_to_width("abcdef", 4), "abcdef")
        self.assertEqual(pad_to_width("\033[1mab\033[0m", 3), "\033[1mab\033[0m ")

    def test_clip_ansi_line_keeps_escapes_and_trailing_reset(self) -> None:
        self.assertEqual(clip_ansi_line("\033[31mhello\033[0m", 3), "\033[31mhel")
        self.assertEqual(clip_ansi_line("\033[31mhi\033[0m", 5), "\033[31mhi\033[0m")
        self.assertEqual(clip_ansi_line("漢字", 3), "漢")
        self.assertEqual(clip_ansi_line("abc", 0), "")

    def test_clip_left_keeps_the_tail(self) -> None:
        self.assertEqual(clip_left("/very/long/path", 5), "/path")
        self.assertEqual(clip_left("short", 10), "short")
        self.assertEqual(clip_left("abc", 0), "")


if __name__ == "__main__":
    unittest.main()
