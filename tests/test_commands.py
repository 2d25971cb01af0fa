from __future__ import annotations

import unittest
from pathlib import Path
from unittest import mock

from gridwalk import commands
from gridwalk.commands import (
    CustomCommandSpec,
    ProcessFinished,
    copy_to_clipboard,
    editor_argv,
    parse_open_with,
    resolve_command_args,
)


class EditorTests(unittest.TestCase):
    def test_parse_open_with_skips_malformed_pairs(self) -> None:
        self.assertEqual(
            parse_open_with("pdf:zathura; .PNG:feh ;bad;:x;y:;a:b:c"),
            {"pdf": "zathura", "png": "feh"},
        )

    def test_lookup_order(self) -> None:
        path = Path("/docs/report.PDF")
        env = {"WALK_EDITOR": "micro", "EDITOR": "nano"}

        self.assertEqual(editor_argv(path, open_with={"pdf": "zathura --fork"}, environ=env), ("zathura", "--fork", str(path)))
        self.assertEqual(editor_argv(path, editor="code -w", environ=env), ("code", "-w", str(path)))
        self.assertEqual(editor_argv(path, environ=env), ("micro", str(path)))
        self.assertEqual(editor_argv(path, environ={"EDITOR": "nano"}), ("nano", str(path)))
        self.assertEqual(editor_argv(path, environ={"EDITOR": "  "}), ("less", str(path)))

    def test_unparsable_candidates_are_skipped(self) -> None:
        path = Path("/tmp/notes.md")

        self.assertEqual(editor_argv(path, editor="vim 'x", environ={"EDITOR": "nano"}), ("nano", str(path)))
        self.assertEqual(editor_argv(path, open_with={"md": 'glow "'}, environ={}), ("less", str(path)))


class CustomCommandArgsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.current_dir = Path("/work")
        self.current_file = Path("/work/sub/file.txt")

    def resolve(self, args: str, **kwargs):
        spec = CustomCommandSpec("test", "cmd", args=args)
        kwargs.setdefault("current_file", self.current_file)
        kwargs.setdefault("selected", [])
        return resolve_command_args(spec, current_dir=self.current_dir, **kwargs)

    def test_directory_and_file_arguments(self) -> None:
        self.assertEqual(self.resolve("currentDir"), ("/work/sub",))
        self.assertEqual(self.resolve("currentDir", current_file=None), ("/work",))
        self.assertEqual(self.resolve("currentFile"), ("/work/sub/file.txt",))
        self.assertIsNone(self.resolve("currentFile", current_file=None))

    def test_selection_arguments(self) -> None:
        selected = [Path("/work/a"), Path("/work/b")]

        self.assertEqual(self.resolve("selectedFiles", selected=selected), ("/work/a", "/work/b"))
        self.assertIsNone(self.resolve("selectedFiles"))
        self.assertEqual(self.resolve("selectedOrCurrentFile", selected=selected), ("/work/a", "/work/b"))
        self.assertEqual(self.resolve("selectedOrCurrentFile"), ("/work/sub/file.txt",))

    def test_input_argument(self) -> None:
        self.assertEqual(self.resolve("input", input_text=" new name "), ("/work/sub", "new name"))
        self.assertIsNone(self.resolve("input", input_text="   "))

    def test_unknown_argument_type(self) -> None:
        self.assertIsNone(self.resolve("everything"))

    def test_spec_helpers(self) -> None:
        spec = CustomCommandSpec("Rename", "mv -i", args="input")

        self.assertTrue(spec.wants_input)
        self.assertEqual(spec.input_prompt, "Enter input: ")
        self.assertEqual(spec.argv("a", "b"), ("mv", "-i", "a", "b"))
        self.assertEqual(CustomCommandSpec("x", "x", prompt="Name: ").input_prompt, "Name: ")

    def test_process_finished_ok(self) -> None:
        self.assertTrue(ProcessFinished(0).ok)
        self.assertFalse(ProcessFinished(1).ok)
        self.assertFalse(ProcessFinished(None, error="cannot run").ok)


class ClipboardTests(unittest.TestCase):
    def test_no_tool_available(self) -> None:
        with mock.patch.object(commands.shutil, "which", return_value=None):
            self.assertFalse(copy_to_clipboard("/tmp/x"))

    def test_first_installed_tool_is_used(self) -> None:
        def which(name: str):
            return "/usr/bin/xclip" if name == "xclip" else None

        completed = mock.Mock(returncode=0)
        with mock.patch.object(commands.shutil, "which", side_effect=which), mock.patch.object(
            commands.subprocess, "run", return_value=completed
        ) as run:
            self.assertTrue(copy_to_clipboard("/tmp/x"))

        self.assertEqual(run.call_args.args[0], ["xclip", "-selection", "clipboard"])
        self.assertEqual(run.call_args.kwargs["input"], "/tmp/x")

    def test_empty_text_is_not_copied(self) -> None:
        self.assertFalse(copy_to_clipboard(""))


if __name__ == "__main__":
    unittest.main()
