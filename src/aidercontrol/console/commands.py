"""REPL line handling.

- ``:name [args]`` runs a control command (toggle, edit, add, pick, ...)
- ``/token [argument]`` dispatches an aider slash command; ``/add``, ``/drop``
  and ``/reset`` also update the tracked files
- anything else is sent to aider as text
"""

from __future__ import annotations

import shlex
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from aidercontrol.diagnostics import Severity
from aidercontrol.session.results import ActionStatus

if TYPE_CHECKING:
    from aidercontrol.console.host import ConsoleHost
    from aidercontrol.session.controller import SessionController
    from aidercontrol.session.results import ActionResult

_HELP = (
    (":toggle", "Show or hide aider (starts it on first use)"),
    (":toggle-all", "Toggle with every open buffer added"),
    (":edit <path>", "Open a file as the current buffer"),
    (":close [path]", "Close a buffer"),
    (":select <start> <end>", "Select a line range (visual-line mode)"),
    (":normal", "Clear the selection"),
    (":send [text]", "Send text, the selection, or prompt for text"),
    (":buffer", "Send the current buffer with an optional prompt"),
    (":diag <line> <message>", "Attach a diagnostic to the current buffer"),
    (":diagnostics", "Send the buffer's diagnostics with an optional prompt"),
    (":add [paths...]", "Add files (the current file by default)"),
    (":add-all", "Add every open buffer"),
    (":drop [path]", "Drop a file (the current file by default)"),
    (":read-only", "Add the current file as read-only"),
    (":reset", "Drop all files and clear the chat history"),
    (":pick", "Open the command picker"),
    (":files", "List files added to the session"),
    (":help", "Show this help message"),
    (":quit", "Exit"),
)


class CommandHandler:
    """Maps REPL lines onto SessionController operations."""

    def __init__(
        self,
        controller: SessionController,
        host: ConsoleHost,
        console: Console | None = None,
    ) -> None:
        self.controller = controller
        self.host = host
        self.console = console or Console()
        self.quit_requested = False

    async def handle(self, line: str) -> ActionResult | None:
        """Handle one REPL line."""
        if line.startswith(":"):
            return await self._control(line[1:])

        if line.startswith("/"):
            return await self._slash(line)

        # Plain text is typed text, never the selection
        self.host.clear_selection()
        return self._show(await self.controller.send_to_terminal(line))

    async def _slash(self, line: str) -> ActionResult | None:
        token, _, argument = line.partition(" ")
        argument = argument.strip()
        c = self.controller

        # File commands go through the controller so the tracked files stay in step
        if token in ("/add", "/drop") and argument:
            try:
                paths = shlex.split(argument)
            except ValueError as e:
                self.console.print(f"[red]{e}[/red]")
                return None
            if token == "/add":
                return self._show(await c.add_files(paths))
            result = None
            for path in paths:
                result = self._show(await c.drop_file(path))
            return result
        if token == "/reset" and not argument:
            return self._show(await c.reset_session())

        return self._show(await c.send_command(token, argument or None))

    async def _control(self, line: str) -> ActionResult | None:
        try:
            parts = shlex.split(line)
        except ValueError as e:
            self.console.print(f"[red]{e}[/red]")
            return None
        if not parts:
            return None

        name, args = parts[0].lower(), parts[1:]
        c = self.controller

        match name:
            case "toggle":
                return self._show(await c.toggle_terminal())
            case "toggle-all":
                return self._show(await c.toggle_with_all_buffers())
            case "edit":
                return await self._edit(args)
            case "close":
                info = self.host.close(args[0] if args else None)
                if info is None:
                    self.console.print("[dim]No such buffer[/dim]")
                    return None
                return self._show(await c.buffer_closed(info))
            case "select":
                return self._select(args)
            case "normal":
                self.host.clear_selection()
                return None
            case "send":
                text = line.partition(" ")[2].strip() or None
                return self._show(await c.send_to_terminal(text))
            case "buffer":
                return self._show(await c.send_buffer_with_prompt())
            case "diag":
                return self._diag(line)
            case "diagnostics":
                return self._show(await c.send_diagnostics_with_prompt())
            case "add":
                if not args:
                    return self._show(await c.add_current_file())
                return self._show(await c.add_files(args))
            case "add-all":
                return self._show(await c.add_all_buffers())
            case "drop":
                if not args:
                    return self._show(await c.drop_current_file())
                return self._show(await c.drop_file(args[0]))
            case "read-only":
                return self._show(await c.add_read_only_file())
            case "reset":
                return self._show(await c.reset_session())
            case "pick":
                return self._show(await c.open_command_picker())
            case "files":
                self._files()
                return None
            case "help":
                self._help()
                return None
            case "quit" | "q":
                self.quit_requested = True
                return None
            case _:
                self.console.print(f"[red]Unknown command: :{name}[/red]")
                self.console.print("Type [bold]:help[/bold] for available commands.")
                return None

    async def _edit(self, args: list[str]) -> ActionResult | None:
        if not args:
            self.console.print("[red]Usage: :edit <path>[/red]")
            return None
        try:
            info = self.host.open(args[0])
        except OSError as e:
            self.console.print(f"[red]Cannot open {args[0]}: {e}[/red]")
            return None
        self.console.print(f"[dim]{info.name}: {len(self.host.buffer_lines())} lines[/dim]")
        return self._show(await self.controller.buffer_opened(info))

    def _select(self, args: list[str]) -> None:
        try:
            start, end = (int(a) for a in args[:2])
        except ValueError:
            self.console.print("[red]Usage: :select <start> <end>[/red]")
            return None
        try:
            self.host.select(start, end)
        except ValueError as e:
            self.console.print(f"[red]{e}[/red]")
        return None

    def _diag(self, line: str) -> None:
        _, _, rest = line.partition(" ")
        number, _, message = rest.strip().partition(" ")
        if not number.isdigit() or not message.strip():
            self.console.print("[red]Usage: :diag <line> <message>[/red]")
            return None
        try:
            self.host.add_diagnostic(int(number), message.strip(), Severity.ERROR)
        except ValueError as e:
            self.console.print(f"[red]{e}[/red]")
        return None

    def _files(self) -> None:
        files = self.controller.files
        if not files:
            self.console.print("[dim]No files in the session[/dim]")
            return
        for path in files:
            self.console.print(f"  {path}", markup=False)

    def _help(self) -> None:
        table = Table(title="Available Commands")
        table.add_column("Command", style="bold")
        table.add_column("Description")
        for cmd, desc in _HELP:
            table.add_row(cmd, desc)
        table.add_row("/<command> [arg]", "Send an aider slash command")
        table.add_row("<text>", "Send text to aider")
        self.console.print(table)

    def _show(self, result: ActionResult) -> ActionResult:
        if result.status is ActionStatus.OK and result.payload:
            first = result.payload.splitlines()[0] if result.payload.strip() else ""
            more = " …" if "\n" in result.payload else ""
            self.console.print(f"→ {first}{more}", style="dim", markup=False)
        return result
