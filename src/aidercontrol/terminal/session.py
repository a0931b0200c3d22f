"""Terminal session owning the assistant process.

The session holds at most one live process. It is created lazily by the
first toggle(), send() or command(); creation is serialized by a lock so
interleaved callers all observe the same handle.
"""

from __future__ import annotations

import asyncio
import shlex
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from aidercontrol.commands import format_command_line
from aidercontrol.config.merge import resolve_options
from aidercontrol.logging import get_logger

if TYPE_CHECKING:
    from aidercontrol.config.schema import Config
    from aidercontrol.terminal.protocol import ProcessHandle, ProcessLauncher

log = get_logger("terminal")


def build_argv(config: Config) -> list[str]:
    """Command line for the assistant: command, args, then theme flags."""
    argv = [*shlex.split(config.command), *config.args]
    for key, value in config.theme.items():
        argv.extend([f"--{key.replace('_', '-')}", value])
    return argv


class TerminalSession:
    """Lifecycle and send primitives for the assistant process."""

    def __init__(self, launcher: ProcessLauncher, config: Config) -> None:
        """Initialize the session.

        Args:
            launcher: Starts the process on first use.
            config: Base config; per-call overrides are merged on top of it.
        """
        self._launcher = launcher
        self._base = config
        self._snapshot: Config | None = None
        self._handle: ProcessHandle | None = None
        self._visible = False
        self._create_lock = asyncio.Lock()

    @property
    def base_config(self) -> Config:
        """Config that per-call overrides are merged onto."""
        return self._base

    @property
    def config(self) -> Config:
        """Config the running process was created with (base config if none)."""
        return self._snapshot or self._base

    @property
    def is_running(self) -> bool:
        return self._handle is not None and self._handle.alive

    @property
    def visible(self) -> bool:
        return self.is_running and self._visible

    async def toggle(self, overrides: Mapping[str, Any] | None = None) -> bool:
        """Create and show the process, or flip its visibility.

        Overrides given to a toggle of an existing process replace its config
        snapshot; the process itself is not restarted.

        Returns:
            True if this call started the process.

        Raises:
            ProcessCreationFailed: If the process could not be started.
        """
        config = resolve_options(self._base, overrides)
        async with self._create_lock:
            if not self.is_running:
                await self._create(config)
                return True

            if overrides:
                self._snapshot = config
            self._set_visible(not self._visible)
            return False

    async def send(
        self,
        text: str,
        overrides: Mapping[str, Any] | None = None,
        start_new_context: bool = False,
    ) -> None:
        """Write text to the process, starting it if needed."""
        handle = await self._ensure(resolve_options(self._base, overrides))
        log.debug("send (%d chars, new_context=%s)", len(text), start_new_context)
        await handle.send_line(text, new_context=start_new_context)

    async def command(
        self,
        token: str,
        argument: str | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> None:
        """Write ``<token> [argument]`` to the process, starting it if needed."""
        handle = await self._ensure(resolve_options(self._base, overrides))
        line = format_command_line(token, argument)
        log.debug("command %s", line)
        await handle.send_line(line)

    async def close(self) -> None:
        """Terminate the process if one is running."""
        async with self._create_lock:
            handle, self._handle = self._handle, None
            self._snapshot = None
            self._visible = False
        if handle is not None:
            await handle.close()

    async def _ensure(self, config: Config) -> ProcessHandle:
        async with self._create_lock:
            if self._handle is not None and self._handle.alive:
                return self._handle
            return await self._create(config)

    async def _create(self, config: Config) -> ProcessHandle:
        # Caller holds _create_lock
        old, self._handle = self._handle, None
        if old is not None:
            log.info("Assistant process is gone, starting a new one")
            await old.close()
        argv = build_argv(config)
        handle = await self._launcher.launch(argv, config)
        self._handle = handle
        self._snapshot = config
        self._set_visible(True)
        return handle

    def _set_visible(self, visible: bool) -> None:
        self._visible = visible
        if self._handle is None:
            return
        if visible:
            self._handle.show()
        else:
            self._handle.hide()
