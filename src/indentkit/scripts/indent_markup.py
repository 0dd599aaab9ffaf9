"""CLI utility to indent or outdent the code lines of a markup document."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from indentkit.editor.commands import INDENT_COMMAND, OUTDENT_COMMAND, Editor
from indentkit.services.settings import Settings, SettingsStore
from indentkit.utils.logging import setup_logging

_COMMANDS = {"indent": INDENT_COMMAND, "outdent": OUTDENT_COMMAND}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Indent or outdent the lines of code blocks touched by the selection.",
    )
    parser.add_argument("action", choices=sorted(_COMMANDS), help="Direction to move the lines")
    parser.add_argument(
        "markup",
        nargs="?",
        default=None,
        help="Document markup, e.g. '<codeBlock>f[]oo</codeBlock>' (defaults to --file or stdin)",
    )
    parser.add_argument("--file", type=Path, default=None, help="Read the markup from this file")
    sequence = parser.add_mutually_exclusive_group()
    sequence.add_argument(
        "--sequence",
        default=None,
        help="Indent unit: literal whitespace, 'tab' or escapes such as '\\t'",
    )
    sequence.add_argument(
        "--disabled",
        action="store_true",
        help="Run with indentation turned off",
    )
    parser.add_argument(
        "--blocks",
        default=None,
        help="Comma-separated block names that can be indented (default: codeBlock)",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Settings JSON file to start from",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Enable logging at this level",
    )
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for the log file")
    return parser


def _read_markup(args: argparse.Namespace) -> str:
    if args.markup is not None:
        return args.markup
    if args.file is not None:
        return args.file.read_text(encoding="utf-8")
    return sys.stdin.read()


def _collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.disabled:
        overrides["indent_sequence"] = False
    elif args.sequence is not None:
        overrides["indent_sequence"] = args.sequence
    if args.blocks:
        overrides["indentable_blocks"] = tuple(
            name.strip() for name in args.blocks.split(",") if name.strip()
        )
    return overrides


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = SettingsStore(args.settings).load() if args.settings else Settings()
        overrides = _collect_overrides(args)
        if overrides:
            settings = replace(settings, **overrides)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    setup_logging(settings, level=args.log_level, log_dir=args.log_dir, force=True)

    try:
        editor = Editor.from_markup(_read_markup(args), settings)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    ran = editor.commands.execute(_COMMANDS[args.action])
    sys.stdout.write(editor.get_data())
    sys.stdout.write("\n")
    return 0 if ran else 1


if __name__ == "__main__":
    raise SystemExit(main())
