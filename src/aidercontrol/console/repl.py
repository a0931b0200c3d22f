"""Interactive REPL driving an aider session."""

from __future__ import annotations

import asyncio
import shlex
from pathlib import Path
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console

from aidercontrol.console.commands import CommandHandler
from aidercontrol.console.host import ConsoleHost
from aidercontrol.console.picker import ConsolePicker
from aidercontrol.logging import get_logger
from aidercontrol.session.controller import SessionController
from aidercontrol.terminal.subprocess_process import SubprocessLauncher

if TYPE_CHECKING:
    from collections.abc import Sequence

    from aidercontrol.config.schema import Config

log = get_logger("repl")


class InteractiveRepl:
    """Reads REPL lines and hands them to the CommandHandler."""

    def __init__(
        self,
        controller: SessionController,
        host: ConsoleHost,
        session: PromptSession[str],
        console: Console,
    ) -> None:
        self.controller = controller
        self.session = session
        self.console = console
        self.commands = CommandHandler(controller, host, console)

    async def run(self) -> None:
        """Run until :quit or end of input, then stop the assistant."""
        self.console.print("[bold]aidercontrol[/bold] - interactive mode")
        self.console.print("Type [bold]:help[/bold] for commands, [bold]:quit[/bold] to exit.\n")

        with patch_stdout():
            while not self.commands.quit_requested:
                try:
                    line = await self.session.prompt_async("aider> ")
                except KeyboardInterrupt:
                    continue
                except EOFError:
                    break

                if not line.strip():
                    continue
                await self.commands.handle(line.rstrip())

        await self.controller.terminal.close()


async def run_repl(
    config: Config,
    files: Sequence[str] = (),
    history_file: Path | None = None,
) -> int:
    """Wire the console host, picker and subprocess launcher, then run the REPL."""
    console = Console()
    history = FileHistory(str(history_file)) if history_file else InMemoryHistory()
    session: PromptSession[str] = PromptSession(
        history=history,
        auto_suggest=AutoSuggestFromHistory(),
    )

    host = ConsoleHost(session, console, cwd=config.cwd)
    picker = ConsolePicker(session, console)
    launcher = SubprocessLauncher(sink=lambda text: console.out(text, end="", highlight=False))
    controller = SessionController.create(host, picker, config, launcher)
    repl = InteractiveRepl(controller, host, session, console)

    for path in files:
        await repl.commands.handle(f":edit {shlex.quote(path)}")

    try:
        await repl.run()
    except asyncio.CancelledError:
        await controller.terminal.close()
        raise
    return 0
