"""Resolve what the user means to send.

An action resolves to exactly one payload source:

- COMMAND: a named catalog command, with an optional argument
- SELECTION: the visual selection, optionally followed by ``> <prompt>``
- BUFFER: the whole buffer, optionally followed by ``> <prompt>``
- DIAGNOSTICS: a diagnostics report, optionally preceded by the prompt
- TYPED: text the user types at a prompt (or passed in explicitly)

Supplementary text is collected through a PendingPrompt, awaited once. A
cancelled prompt resolves to None and nothing is sent; an empty submission
keeps the base text as is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from aidercontrol.commands import ArgCommand, FixedCommand, format_command_line
from aidercontrol.diagnostics import format_diagnostics
from aidercontrol.errors import NoDiagnostics, UnknownCommand
from aidercontrol.logging import get_logger

if TYPE_CHECKING:
    from aidercontrol.commands import Command, CommandCatalog
    from aidercontrol.protocols.host import EditorHost

log = get_logger("resolver")

SELECTION_PROMPT = "Add a prompt to your selection (empty to skip):"
BUFFER_PROMPT = "Add a prompt to your buffer (empty to skip):"
DIAGNOSTICS_PROMPT = "Add a prompt for the diagnostics:"
TYPED_PROMPT = "Send to Aider: "
DEFAULT_FILE_TYPE = "text"


class PayloadSource(Enum):
    """Where the text of an action comes from."""

    COMMAND = "command"
    SELECTION = "selection"
    BUFFER = "buffer"
    DIAGNOSTICS = "diagnostics"
    TYPED = "typed"

    def __str__(self) -> str:
        return self.value


def append_prompt(base: str, user_input: str) -> str:
    """Add the user's prompt as a quoted line after the base text."""
    if not user_input:
        return base
    return f"{base}\n> {user_input}"


def prepend_prompt(base: str, user_input: str) -> str:
    """Put the user's prompt on the line before the base text."""
    if not user_input:
        return base
    return f"{user_input}\n{base}"


@dataclass(slots=True)
class PendingPrompt:
    """A request for supplementary text tied to one action.

    Resolved (input arrives) or abandoned (input is cancelled) exactly once.
    """

    source: PayloadSource
    base_text: str
    prompt: str
    default: str | None = None
    start_new_context: bool = False
    _settled: bool = field(default=False, init=False, repr=False)

    async def collect(self, host: EditorHost) -> str | None:
        """Ask the host for the text; None means the user cancelled."""
        if self._settled:
            raise RuntimeError(f"Prompt for {self.source} was already resolved")
        try:
            return await host.prompt_for_text(self.prompt, default=self.default)
        finally:
            self._settled = True

    def apply(self, user_input: str) -> str:
        """Combine the base text with the submitted input."""
        match self.source:
            case PayloadSource.SELECTION | PayloadSource.BUFFER:
                return append_prompt(self.base_text, user_input)
            case PayloadSource.DIAGNOSTICS:
                return prepend_prompt(self.base_text, user_input)
            case PayloadSource.TYPED:
                return user_input
            case _:
                raise ValueError(f"No prompt combination for {self.source}")


@dataclass(frozen=True, slots=True)
class ResolvedInput:
    """A fully resolved payload, ready to send."""

    source: PayloadSource
    text: str
    start_new_context: bool = False
    file_type: str | None = None
    command: Command | None = None
    argument: str | None = None


class InputResolver:
    """Turns the editor's state into a ResolvedInput."""

    def __init__(self, host: EditorHost, catalog: CommandCatalog) -> None:
        self._host = host
        self._catalog = catalog

    def resolve_command(self, name: str, argument: str | None = None) -> ResolvedInput:
        """Resolve an explicitly named command.

        A ``/token`` the catalog does not know is passed through to aider
        unchanged; aider has more slash commands than the catalog lists.

        Raises:
            UnknownCommand: If a bare name matches no catalog entry.
        """
        try:
            command = self._catalog.lookup(name)
        except UnknownCommand:
            if not name.startswith("/") or len(name) < 2:
                raise
            log.debug("Passing through uncatalogued command %s", name)
            command = ArgCommand(name=name[1:], token=name)
        return ResolvedInput(
            source=PayloadSource.COMMAND,
            text=format_command_line(command.token, argument),
            command=command,
            argument=argument or None,
        )

    async def resolve_picked(self, command: Command) -> ResolvedInput | None:
        """Resolve a command chosen in the picker, prompting for its input."""
        match command:
            case ArgCommand(token=token):
                user_input = await self._host.prompt_for_text(
                    f"Enter input for `{token}` (empty to skip):"
                )
                if user_input is None:
                    log.debug("Input for %s cancelled", token)
                    return None
                argument = user_input or None
            case FixedCommand():
                argument = None
            case _:
                raise TypeError(f"Not a command: {command!r}")
        return ResolvedInput(
            source=PayloadSource.COMMAND,
            text=format_command_line(command.token, argument),
            command=command,
            argument=argument,
        )

    async def resolve_send(self, text: str | None = None) -> ResolvedInput | None:
        """Resolve a plain send: visual selection, explicit text, or typed."""
        if self._host.mode().is_visual:
            pending = PendingPrompt(
                source=PayloadSource.SELECTION,
                base_text="\n".join(self._host.selected_lines()),
                prompt=SELECTION_PROMPT,
                start_new_context=True,
            )
            return await self._complete(pending)

        if text:
            return ResolvedInput(source=PayloadSource.TYPED, text=text)

        pending = PendingPrompt(source=PayloadSource.TYPED, base_text="", prompt=TYPED_PROMPT)
        return await self._complete(pending)

    async def resolve_buffer(self) -> ResolvedInput | None:
        """Resolve the whole current buffer."""
        pending = PendingPrompt(
            source=PayloadSource.BUFFER,
            base_text="\n".join(self._host.buffer_lines()),
            prompt=BUFFER_PROMPT,
            start_new_context=True,
        )
        file_type = self._host.file_type() or DEFAULT_FILE_TYPE
        return await self._complete(pending, file_type=file_type)

    async def resolve_diagnostics(self) -> ResolvedInput | None:
        """Resolve the current buffer's diagnostics report.

        Raises:
            NoDiagnostics: If the buffer has none; nothing should be sent.
        """
        diagnostics = self._host.diagnostics()
        if not diagnostics:
            raise NoDiagnostics("No diagnostics found in the current buffer.")

        buffer_name = self._host.buffer_name()
        pending = PendingPrompt(
            source=PayloadSource.DIAGNOSTICS,
            base_text=format_diagnostics(diagnostics),
            prompt=DIAGNOSTICS_PROMPT,
            default=f"Here are the diagnostics for {buffer_name}:",
            start_new_context=True,
        )
        return await self._complete(pending)

    async def _complete(
        self, pending: PendingPrompt, file_type: str | None = None
    ) -> ResolvedInput | None:
        user_input = await pending.collect(self._host)
        if user_input is None:
            log.debug("Prompt for %s cancelled", pending.source)
            return None
        return ResolvedInput(
            source=pending.source,
            text=pending.apply(user_input),
            start_new_context=pending.start_new_context,
            file_type=file_type,
        )
