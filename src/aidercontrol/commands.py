"""Catalog of aider slash commands.

Each entry is one of two variants:

- FixedCommand: dispatched as its token alone (``/reset``).
- ArgCommand: takes free-form input, dispatched as ``<token> <argument>``.

Callers branch on the variant with ``match`` instead of comparing category
strings. User-registered entries from config build the same variants.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from aidercontrol.errors import UnknownCommand
from aidercontrol.protocols.host import PickerItem

if TYPE_CHECKING:
    from aidercontrol.config.schema import CommandConfig


@dataclass(frozen=True, slots=True)
class FixedCommand:
    """A command that takes no input."""

    name: str
    token: str
    description: str = ""

    @property
    def requires_input(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class ArgCommand:
    """A command that takes free-form input."""

    name: str
    token: str
    description: str = ""

    @property
    def requires_input(self) -> bool:
        return True


Command = FixedCommand | ArgCommand

# (name, requires_input, description)
_BUILTINS: tuple[tuple[str, bool, str], ...] = (
    ("add", True, "Add files to the chat so aider can edit them or review them in detail"),
    ("architect", True, "Enter architect mode to discuss high-level design and architecture"),
    ("ask", True, "Ask questions about the code base without editing any files"),
    ("chat-mode", True, "Switch to a new chat mode"),
    ("clear", False, "Clear the chat history"),
    ("code", True, "Ask for changes to your code"),
    ("commit", True, "Commit edits to the repo made outside the chat (commit message optional)"),
    ("copy", False, "Copy the last assistant message to the clipboard"),
    ("diff", False, "Display the diff of changes since the last message"),
    ("drop", True, "Remove files from the chat session to free up context space"),
    ("editor", False, "Open an editor to write a prompt"),
    ("exit", False, "Exit the application"),
    ("git", True, "Run a git command (output excluded from chat)"),
    ("help", True, "Ask questions about aider"),
    ("lint", True, "Lint and fix in-chat files or all dirty files if none in chat"),
    ("ls", False, "List all known files and indicate which are included in the chat session"),
    ("map", False, "Print out the current repository map"),
    ("map-refresh", False, "Force a refresh of the repository map"),
    ("model", True, "Switch to a new LLM"),
    ("models", True, "Search the list of available models"),
    ("paste", False, "Paste image/text from the clipboard into the chat"),
    ("quit", False, "Exit the application"),
    ("read-only", True, "Add files to the chat that are for reference only"),
    ("report", False, "Report a problem by opening a GitHub Issue"),
    ("reset", False, "Drop all files and clear the chat history"),
    ("run", True, "Run a shell command and optionally add the output to the chat"),
    ("settings", False, "Print out the current settings"),
    ("test", True, "Run a shell command and add the output to the chat on non-zero exit code"),
    ("tokens", False, "Report on the number of tokens used by the current chat context"),
    ("undo", False, "Undo the last git commit if it was done by aider"),
    ("voice", False, "Record and transcribe voice input"),
    ("web", True, "Scrape a webpage, convert to markdown and send in a message"),
)


def make_command(name: str, token: str, requires_input: bool, description: str = "") -> Command:
    """Build the command variant for a catalog entry."""
    if requires_input:
        return ArgCommand(name=name, token=token, description=description)
    return FixedCommand(name=name, token=token, description=description)


def format_command_line(token: str, argument: str | None = None) -> str:
    """Join a command token and its optional argument into one line."""
    if argument:
        return f"{token} {argument}"
    return token


class CommandCatalog:
    """Name -> command lookup table.

    Names are unique; registering an existing name replaces the entry.
    Lookups accept either the bare name (``add``) or the token (``/add``).
    """

    def __init__(self, commands: Iterable[Command] = ()) -> None:
        self._commands: dict[str, Command] = {}
        for command in commands:
            self._commands[command.name] = command

    @classmethod
    def default(cls, extra: Iterable[CommandConfig] = ()) -> CommandCatalog:
        """Built-in aider commands plus user-registered entries."""
        catalog = cls(
            make_command(name, f"/{name}", requires_input, description)
            for name, requires_input, description in _BUILTINS
        )
        for entry in extra:
            catalog.register(entry.name, entry.token, entry.input, entry.description)
        return catalog

    def register(
        self, name: str, token: str, requires_input: bool = False, description: str = ""
    ) -> Command:
        command = make_command(name, token, requires_input, description)
        self._commands[name] = command
        return command

    def lookup(self, name: str) -> Command:
        """Find a command by name or token.

        Raises:
            UnknownCommand: If no entry matches.
        """
        command = self._commands.get(name)
        if command is not None:
            return command
        for command in self._commands.values():
            if command.token == name:
                return command
        raise UnknownCommand(name)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        try:
            self.lookup(name)
        except UnknownCommand:
            return False
        return True

    def __iter__(self) -> Iterator[Command]:
        return iter(sorted(self._commands.values(), key=lambda c: c.name))

    def __len__(self) -> int:
        return len(self._commands)

    def picker_items(self) -> list[PickerItem]:
        """Rows for the command picker, sorted by name."""
        items = []
        for command in self:
            match command:
                case ArgCommand():
                    category = "input"
                case FixedCommand():
                    category = "direct"
                case _:
                    raise TypeError(f"Not a command: {command!r}")
            items.append(
                PickerItem(
                    text=command.token,
                    category=category,
                    description=command.description,
                    command=command,
                )
            )
        return items
