"""Subprocess-backed assistant process.

Uses pipe-based I/O rather than a PTY. Multi-line messages are framed with
aider's ``{tag ... tag}`` block syntax so they arrive as a single message.
"""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import os
import platform
import signal
from collections.abc import Callable
from typing import TYPE_CHECKING

from aidercontrol.errors import ProcessCreationFailed
from aidercontrol.logging import get_logger

if TYPE_CHECKING:
    from aidercontrol.config.schema import Config

log = get_logger("terminal")

_WINDOWS = platform.system() == "Windows"

BLOCK_TAG = "aidercontrol"

OutputSink = Callable[[str], None]


def encode_payload(text: str, new_context: bool = False) -> bytes:
    """Encode one message for the process's stdin."""
    if new_context:
        text = f"{{{BLOCK_TAG}\n{text}\n{BLOCK_TAG}}}"
    return (text + "\n").encode("utf-8")


def _send_interrupt(process: asyncio.subprocess.Process) -> None:
    """Send interrupt signal to process (Ctrl-Break on Windows, SIGINT on Unix)."""
    try:
        if _WINDOWS:
            os.kill(process.pid, signal.CTRL_BREAK_EVENT)  # type: ignore[attr-defined]
        else:
            os.kill(process.pid, signal.SIGINT)
    except OSError:
        process.terminate()


async def graceful_shutdown(
    process: asyncio.subprocess.Process,
    interrupt_timeout: float = 2.0,
    terminate_timeout: float = 3.0,
) -> None:
    """Gracefully shutdown a process: interrupt → terminate → kill."""
    if process.returncode is not None:
        return

    try:
        _send_interrupt(process)
        try:
            await asyncio.wait_for(process.wait(), timeout=interrupt_timeout)
            return
        except asyncio.TimeoutError:
            pass

        process.terminate()
        try:
            await asyncio.wait_for(process.wait(), timeout=terminate_timeout)
            return
        except asyncio.TimeoutError:
            pass

        process.kill()
        await process.wait()
    except ProcessLookupError:
        pass  # Process already gone


class SubprocessProcess:
    """ProcessHandle over an asyncio subprocess.

    Output is streamed to ``sink`` while visible. While hidden it is kept in
    a bounded buffer and flushed on the next show().
    """

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        sink: OutputSink | None = None,
        buffer_limit: int = 200_000,
    ) -> None:
        self._process = process
        self._sink = sink
        self._buffer_limit = buffer_limit
        self._pending: list[str] = []
        self._pending_size = 0
        self._visible = True
        self._broken = False
        self._output_task = asyncio.create_task(self._stream_output())

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    @property
    def alive(self) -> bool:
        return self._process.returncode is None and not self._broken

    async def send_line(self, text: str, *, new_context: bool = False) -> None:
        stdin = self._process.stdin
        if stdin is None or not self.alive:
            log.warning("Dropping message, assistant process is not running")
            return
        try:
            stdin.write(encode_payload(text, new_context))
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            log.warning("Assistant process closed its input: %s", e)
            self._broken = True

    def show(self) -> None:
        self._visible = True
        if self._pending and self._sink is not None:
            self._sink("".join(self._pending))
        self._pending.clear()
        self._pending_size = 0

    def hide(self) -> None:
        self._visible = False

    async def close(self) -> None:
        if self._process.stdin is not None:
            with contextlib.suppress(OSError):
                self._process.stdin.close()
        await graceful_shutdown(self._process)
        self._output_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._output_task

    def _emit(self, text: str) -> None:
        if self._visible:
            if self._sink is not None:
                self._sink(text)
            return
        self._pending.append(text)
        self._pending_size += len(text)
        while self._pending_size > self._buffer_limit and len(self._pending) > 1:
            self._pending_size -= len(self._pending.pop(0))

    async def _stream_output(self) -> None:
        stdout = self._process.stdout
        if stdout is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await stdout.read(1024)
            if not chunk:
                break
            text = decoder.decode(chunk)
            if text:
                self._emit(text)
        tail = decoder.decode(b"", final=True)
        if tail:
            self._emit(tail)
        returncode = await self._process.wait()
        log.info("Assistant process %d exited with code %s", self._process.pid, returncode)


class SubprocessLauncher:
    """Start the assistant with asyncio subprocess pipes."""

    def __init__(self, sink: OutputSink | None = None) -> None:
        """Initialize the launcher.

        Args:
            sink: Receives decoded process output while the terminal is visible.
        """
        self._sink = sink

    async def launch(self, argv: list[str], config: Config) -> SubprocessProcess:
        if not argv:
            raise ProcessCreationFailed(argv, "empty command")

        process_env = os.environ.copy()
        if config.env:
            process_env.update(config.env)

        working_dir = config.cwd or os.getcwd()

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,  # Merge stderr into stdout
                cwd=working_dir,
                env=process_env,
            )
        except FileNotFoundError:
            raise ProcessCreationFailed(argv, "command not found") from None
        except PermissionError:
            raise ProcessCreationFailed(argv, "permission denied") from None
        except OSError as e:
            raise ProcessCreationFailed(argv, str(e)) from e

        log.info("Started assistant process %d: %s", process.pid, " ".join(argv))
        return SubprocessProcess(process, self._sink)
