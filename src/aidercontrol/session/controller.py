"""Session controller: the API surface editor actions call into.

Each operation is one coroutine per user action. Prompts are awaited inside
it, so registry and process mutations always happen after the prompt has
resolved. Errors from the taxonomy in aidercontrol.errors are reported to
the host as a single notification and returned as an ActionResult; they
never escape to the caller.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from aidercontrol.commands import CommandCatalog
from aidercontrol.config.merge import resolve_options
from aidercontrol.errors import AiderControlError, EmptyInput, MissingArgument
from aidercontrol.logging import get_logger
from aidercontrol.protocols.host import BufferInfo, NotifyLevel
from aidercontrol.session.registry import FileRegistry
from aidercontrol.session.resolver import InputResolver, ResolvedInput
from aidercontrol.session.results import ActionResult, ActionStatus
from aidercontrol.terminal.session import TerminalSession

if TYPE_CHECKING:
    from aidercontrol.config.schema import Config
    from aidercontrol.protocols.host import EditorHost, Picker
    from aidercontrol.terminal.protocol import ProcessLauncher

log = get_logger("session")

Overrides = Mapping[str, Any] | None

_LOG_LEVELS = {
    NotifyLevel.DEBUG: logging.DEBUG,
    NotifyLevel.INFO: logging.INFO,
    NotifyLevel.WARNING: logging.WARNING,
    NotifyLevel.ERROR: logging.ERROR,
}


def valid_buffer_paths(buffers: Iterable[BufferInfo], ignore_patterns: Sequence[str]) -> list[str]:
    """File paths of listed buffers whose names match no ignore pattern."""
    patterns = []
    for pattern in ignore_patterns:
        try:
            patterns.append(re.compile(pattern))
        except re.error as e:
            log.warning("Ignoring invalid ignore_buffers pattern %r: %s", pattern, e)

    paths: list[str] = []
    for buffer in buffers:
        if not buffer.listed or not buffer.path:
            continue
        if any(p.search(buffer.name) for p in patterns):
            continue
        if buffer.path not in paths:
            paths.append(buffer.path)
    return paths


class SessionController:
    """Composes the resolver, terminal session and file registry."""

    def __init__(
        self,
        host: EditorHost,
        terminal: TerminalSession,
        picker: Picker,
        catalog: CommandCatalog | None = None,
        registry: FileRegistry | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            host: Editor collaborator (buffers, prompts, notifications).
            terminal: Owner of the assistant process.
            picker: List widget for open_command_picker().
            catalog: Command catalog; built-ins plus the terminal config's
                user commands if omitted.
            registry: File registry; a fresh one if omitted.
        """
        self._host = host
        self._terminal = terminal
        self._picker = picker
        self._catalog = catalog or CommandCatalog.default(terminal.base_config.commands)
        self._registry = registry if registry is not None else FileRegistry()
        self._resolver = InputResolver(host, self._catalog)

    @classmethod
    def create(
        cls,
        host: EditorHost,
        picker: Picker,
        config: Config,
        launcher: ProcessLauncher,
    ) -> SessionController:
        """Build a controller with its own terminal session."""
        return cls(host, TerminalSession(launcher, config), picker)

    @property
    def files(self) -> list[str]:
        """Paths currently tracked as added to the session."""
        return self._registry.paths()

    @property
    def catalog(self) -> CommandCatalog:
        return self._catalog

    @property
    def terminal(self) -> TerminalSession:
        return self._terminal

    # -------------------------------------------------------------------------
    # Terminal
    # -------------------------------------------------------------------------

    async def toggle_terminal(self, overrides: Overrides = None) -> ActionResult:
        """Show or hide the assistant, starting it on first use.

        A newly started session with ``auto_manage_context`` gets every valid
        buffer added to it.
        """
        try:
            created = await self._terminal.toggle(overrides)
        except AiderControlError as e:
            return self._report(e)

        if created and self._terminal.config.auto_manage_context:
            paths = valid_buffer_paths(
                self._host.list_buffers(), self._terminal.config.ignore_buffers
            )
            if paths:
                return await self.add_files(paths, overrides)

        state = "visible" if self._terminal.visible else "hidden"
        return ActionResult(ActionStatus.OK, message=f"Aider terminal {state}")

    async def toggle_with_all_buffers(self, overrides: Overrides = None) -> ActionResult:
        """Toggle with ``auto_manage_context`` forced on."""
        return await self.toggle_terminal({**(overrides or {}), "auto_manage_context": True})

    # -------------------------------------------------------------------------
    # Sending text
    # -------------------------------------------------------------------------

    async def send_to_terminal(
        self, text: str | None = None, overrides: Overrides = None
    ) -> ActionResult:
        """Send the visual selection, the given text, or text typed at a prompt."""
        try:
            resolved = await self._resolver.resolve_send(text)
            return await self._send(resolved, overrides)
        except AiderControlError as e:
            return self._report(e)

    async def send_buffer_with_prompt(self, overrides: Overrides = None) -> ActionResult:
        """Send the whole buffer, with an optional prompt line appended."""
        try:
            resolved = await self._resolver.resolve_buffer()
            return await self._send(resolved, overrides)
        except AiderControlError as e:
            return self._report(e)

    async def send_diagnostics_with_prompt(self, overrides: Overrides = None) -> ActionResult:
        """Send the buffer's diagnostics, with an optional prompt prepended."""
        try:
            resolved = await self._resolver.resolve_diagnostics()
            return await self._send(resolved, overrides)
        except AiderControlError as e:
            return self._report(e)

    async def _send(self, resolved: ResolvedInput | None, overrides: Overrides) -> ActionResult:
        if resolved is None:
            return ActionResult(ActionStatus.CANCELLED)
        await self._terminal.send(resolved.text, overrides, resolved.start_new_context)
        return ActionResult(ActionStatus.OK, payload=resolved.text)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def send_command(
        self, name: str, argument: str | None = None, overrides: Overrides = None
    ) -> ActionResult:
        """Dispatch a catalog command by name or token, or an uncatalogued ``/token``."""
        try:
            resolved = self._resolver.resolve_command(name, argument)
            return await self._dispatch(resolved, overrides)
        except AiderControlError as e:
            return self._report(e)

    async def open_command_picker(self, overrides: Overrides = None) -> ActionResult:
        """Let the user pick a command, prompting for input where it takes one."""
        config = resolve_options(self._terminal.base_config, overrides)
        try:
            item = await self._picker.choose(self._catalog.picker_items(), config.picker)
        finally:
            self._picker.close()

        if item is None:
            log.debug("Command picker dismissed")
            return ActionResult(ActionStatus.CANCELLED)

        try:
            resolved = await self._resolver.resolve_picked(item.command)
            if resolved is None:
                return ActionResult(ActionStatus.CANCELLED)
            return await self._dispatch(resolved, overrides)
        except AiderControlError as e:
            return self._report(e)

    async def _dispatch(self, resolved: ResolvedInput, overrides: Overrides) -> ActionResult:
        assert resolved.command is not None
        await self._terminal.command(resolved.command.token, resolved.argument, overrides)
        return ActionResult(ActionStatus.OK, payload=resolved.text)

    # -------------------------------------------------------------------------
    # File membership
    # -------------------------------------------------------------------------

    async def add_file(self, path: str | None, overrides: Overrides = None) -> ActionResult:
        """Add one file to the session."""
        try:
            if not path:
                raise MissingArgument("No file path provided")
            result = await self._file_command("add", path, overrides)
        except AiderControlError as e:
            return self._report(e)
        self._registry.add(path)
        return result

    async def add_files(
        self, paths: Sequence[str] | None, overrides: Overrides = None
    ) -> ActionResult:
        """Add several files with a single ``/add`` command."""
        paths = list(paths or [])
        try:
            if not paths:
                raise EmptyInput("No file paths provided")
            if not all(paths):
                raise MissingArgument("Empty file path in list")
            if len(paths) == 1:
                return await self.add_file(paths[0], overrides)
            result = await self._file_command("add", " ".join(paths), overrides)
        except AiderControlError as e:
            return self._report(e)

        self._registry.add_all(paths)
        message = f"Added {len(paths)} files to aider session"
        self._notify(message, NotifyLevel.INFO)
        return ActionResult(ActionStatus.OK, message=message, payload=result.payload)

    async def add_current_file(self, overrides: Overrides = None) -> ActionResult:
        """Add the current buffer's file."""
        try:
            path = self._current_file()
        except AiderControlError as e:
            return self._report(e)
        return await self.add_file(path, overrides)

    async def add_all_buffers(self, overrides: Overrides = None) -> ActionResult:
        """Add every listed file buffer not matched by ``ignore_buffers``."""
        config = resolve_options(self._terminal.base_config, overrides)
        paths = valid_buffer_paths(self._host.list_buffers(), config.ignore_buffers)
        if not paths:
            return self._report(EmptyInput("No valid buffers found to add"))
        return await self.add_files(paths, overrides)

    async def drop_file(self, path: str | None, overrides: Overrides = None) -> ActionResult:
        """Remove one file from the session; unknown paths are fine."""
        try:
            if not path:
                raise MissingArgument("No file path provided")
            result = await self._file_command("drop", path, overrides)
        except AiderControlError as e:
            return self._report(e)
        self._registry.remove(path)
        return result

    async def drop_current_file(self, overrides: Overrides = None) -> ActionResult:
        """Remove the current buffer's file."""
        try:
            path = self._current_file()
        except AiderControlError as e:
            return self._report(e)
        return await self.drop_file(path, overrides)

    async def add_read_only_file(self, overrides: Overrides = None) -> ActionResult:
        """Share the current file for reference; it is not tracked."""
        try:
            path = self._current_file()
            return await self._file_command("read-only", path, overrides)
        except AiderControlError as e:
            return self._report(e)

    async def reset_session(self, overrides: Overrides = None) -> ActionResult:
        """Drop all files and clear the chat history."""
        try:
            result = await self._file_command("reset", None, overrides)
        except AiderControlError as e:
            return self._report(e)
        self._registry.clear()
        return result

    async def _file_command(
        self, name: str, argument: str | None, overrides: Overrides
    ) -> ActionResult:
        return await self._dispatch(self._resolver.resolve_command(name, argument), overrides)

    def _current_file(self) -> str:
        path = self._host.current_file_path()
        if not path:
            raise EmptyInput("No valid file in current buffer")
        return path

    # -------------------------------------------------------------------------
    # Editor events (auto-managed context)
    # -------------------------------------------------------------------------

    async def buffer_opened(self, buffer: BufferInfo) -> ActionResult:
        """Add a newly opened buffer when the session manages context."""
        if not self._auto_managed():
            return ActionResult(ActionStatus.SKIPPED)
        paths = valid_buffer_paths([buffer], self._terminal.config.ignore_buffers)
        if not paths or paths[0] in self._registry:
            return ActionResult(ActionStatus.SKIPPED)
        return await self.add_file(paths[0])

    async def buffer_closed(self, buffer: BufferInfo) -> ActionResult:
        """Drop a closed buffer's file when the session manages context."""
        if not self._auto_managed() or buffer.path not in self._registry:
            return ActionResult(ActionStatus.SKIPPED)
        return await self.drop_file(buffer.path)

    def _auto_managed(self) -> bool:
        return self._terminal.is_running and self._terminal.config.auto_manage_context

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def _notify(self, message: str, level: NotifyLevel) -> None:
        log.log(_LOG_LEVELS[level], message)
        self._host.notify(message, level)

    def _report(self, error: AiderControlError) -> ActionResult:
        self._notify(str(error), error.level)
        status = ActionStatus.ERROR if error.level is NotifyLevel.ERROR else ActionStatus.INFO
        return ActionResult(status, message=str(error))
