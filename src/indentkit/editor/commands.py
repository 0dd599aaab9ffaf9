"""Editor host object plus a named command registry with keystrokes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Protocol

from ..indentation.command import IndentCodeBlockCommand, IndentDirection
from ..services.settings import DEFAULT_KEYSTROKES, Settings
from .document_model import Block, Document
from .markup import DEFAULT_CONTAINERS, parse_markup, stringify_document

LOGGER = logging.getLogger(__name__)

INDENT_COMMAND = "indentCodeBlock"
OUTDENT_COMMAND = "outdentCodeBlock"
_COMMAND_LABELS = {
    INDENT_COMMAND: "Increase code indentation",
    OUTDENT_COMMAND: "Decrease code indentation",
}


class Command(Protocol):
    """Anything the registry can enable-check and run."""

    @property
    def is_enabled(self) -> bool:
        ...

    def execute(self) -> None:
        ...


@dataclass(slots=True)
class CommandAction:
    """Descriptor for menus, toolbars and palettes."""

    name: str
    label: str
    shortcut: str | None = None
    callback: Callable[[], Any] | None = None

    def trigger(self) -> None:
        """Invoke the registered callback, if available."""

        if self.callback is not None:
            self.callback()


def normalize_keystroke(keystroke: str) -> str:
    """Return a canonical, case-insensitive form of ``keystroke`` (``"shift+tab"``)."""

    parts = [part.strip().lower() for part in keystroke.split("+") if part.strip()]
    if not parts:
        raise ValueError("keystroke must not be empty")
    *modifiers, key = parts
    return "+".join(sorted(set(modifiers)) + [key])


class CommandRegistry:
    """Named commands and the keystrokes bound to them."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}
        self._labels: dict[str, str] = {}
        self._shortcuts: dict[str, str] = {}
        self._keystrokes: dict[str, str] = {}

    def add(
        self,
        name: str,
        command: Command,
        *,
        keystroke: str | None = None,
        label: str | None = None,
    ) -> None:
        if name in self._commands:
            raise ValueError(f"Command {name!r} is already registered")
        self._commands[name] = command
        self._labels[name] = label or name
        if keystroke:
            self.bind(keystroke, name)

    def bind(self, keystroke: str, name: str) -> None:
        """Route ``keystroke`` to the command ``name``, replacing any earlier binding.

        A command has at most one keystroke: its old one stops working.
        """

        if name not in self._commands:
            raise KeyError(name)
        key = normalize_keystroke(keystroke)
        old_shortcut = self._shortcuts.get(name)
        if old_shortcut is not None:
            old_key = normalize_keystroke(old_shortcut)
            if old_key != key and self._keystrokes.get(old_key) == name:
                del self._keystrokes[old_key]
        previous = self._keystrokes.get(key)
        if previous is not None and previous != name:
            LOGGER.debug("Keystroke %s rebound from %s to %s", keystroke, previous, name)
            self._shortcuts.pop(previous, None)
        self._keystrokes[key] = name
        self._shortcuts[name] = keystroke

    def get(self, name: str) -> Command:
        return self._commands[name]

    def names(self) -> list[str]:
        return list(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def execute(self, name: str) -> bool:
        """Run ``name`` if it is enabled; return whether it ran."""

        command = self._commands[name]
        if not command.is_enabled:
            LOGGER.debug("Command %s is disabled", name)
            return False
        command.execute()
        return True

    def handle_keystroke(self, keystroke: str) -> bool:
        """Run the command bound to ``keystroke``.

        Returns ``False`` when nothing is bound or the command is disabled, so
        the host can fall back to its default key handling.
        """

        name = self._keystrokes.get(normalize_keystroke(keystroke))
        if name is None:
            return False
        return self.execute(name)

    def actions(self) -> dict[str, CommandAction]:
        return {
            name: CommandAction(
                name=name,
                label=self._labels[name],
                shortcut=self._shortcuts.get(name),
                callback=lambda name=name: self.execute(name),
            )
            for name in self._commands
        }


class Editor:
    """Host owning a document, its settings and the registered commands."""

    def __init__(
        self,
        document: Document | None = None,
        settings: Settings | None = None,
        *,
        is_indentable: Callable[[Block], bool] | None = None,
        register_defaults: bool = True,
    ) -> None:
        self.document = document if document is not None else Document([Block("paragraph")])
        self.settings = settings if settings is not None else Settings()
        self._is_indentable = is_indentable
        self.commands = CommandRegistry()
        if register_defaults:
            register_indentation_commands(self)

    @classmethod
    def from_markup(
        cls,
        markup: str,
        settings: Settings | None = None,
        *,
        containers: Iterable[str] = DEFAULT_CONTAINERS,
        **kwargs: Any,
    ) -> "Editor":
        return cls(parse_markup(markup, containers=containers), settings, **kwargs)

    def is_indentable(self, block: Block) -> bool:
        if self._is_indentable is not None:
            return self._is_indentable(block)
        return block.name in self.settings.indentable_blocks

    def get_data(self, *, with_selection: bool = True) -> str:
        return stringify_document(self.document, with_selection=with_selection)

    def set_data(self, markup: str, *, containers: Iterable[str] = DEFAULT_CONTAINERS) -> None:
        self.document = parse_markup(markup, containers=containers)


def register_indentation_commands(editor: Editor) -> tuple[IndentCodeBlockCommand, IndentCodeBlockCommand]:
    """Register the indent/outdent commands and their keystrokes on ``editor``."""

    keystrokes = dict(DEFAULT_KEYSTROKES)
    keystrokes.update(editor.settings.keystrokes or {})
    indent = IndentCodeBlockCommand(editor, IndentDirection.FORWARD)
    outdent = IndentCodeBlockCommand(editor, IndentDirection.BACKWARD)
    for name, command in ((INDENT_COMMAND, indent), (OUTDENT_COMMAND, outdent)):
        editor.commands.add(
            name,
            command,
            keystroke=keystrokes.get(name),
            label=_COMMAND_LABELS[name],
        )
    return indent, outdent


__all__ = [
    "INDENT_COMMAND",
    "OUTDENT_COMMAND",
    "Command",
    "CommandAction",
    "CommandRegistry",
    "Editor",
    "normalize_keystroke",
    "register_indentation_commands",
]
