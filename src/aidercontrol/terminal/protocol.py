"""Process protocols for the assistant terminal."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from aidercontrol.config.schema import Config


class ProcessHandle(Protocol):
    """A running assistant process.

    Implementations:
    - SubprocessProcess: local asyncio subprocess with piped stdio
    """

    @property
    def alive(self) -> bool:
        """True while the process can accept input."""
        ...

    async def send_line(self, text: str, *, new_context: bool = False) -> None:
        """Write one message to the process input.

        Args:
            text: Message text; may span several lines.
            new_context: Mark the message as the start of a fresh
                conversational context rather than a continuation.
        """
        ...

    def show(self) -> None:
        """Make process output visible."""
        ...

    def hide(self) -> None:
        """Hide process output; the process keeps running."""
        ...

    async def close(self) -> None:
        """Terminate the process."""
        ...


class ProcessLauncher(Protocol):
    """Factory for process handles."""

    async def launch(self, argv: list[str], config: Config) -> ProcessHandle:
        """Start a process.

        Raises:
            ProcessCreationFailed: If the process cannot be started.
        """
        ...
