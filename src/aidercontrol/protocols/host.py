"""Protocols for the editor-side collaborators.

The controller never talks to an editor directly. Everything it needs from
the host (mode, buffers, diagnostics, notifications, text prompts) and from
the command picker goes through the protocols in this module.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from aidercontrol.commands import Command
    from aidercontrol.config.schema import PickerConfig
    from aidercontrol.diagnostics import Diagnostic


class NotifyLevel(Enum):
    """Severity of a user-visible notification."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class EditorMode(Enum):
    """Editor interaction mode at the time an action is invoked."""

    NORMAL = "normal"
    INSERT = "insert"
    VISUAL_CHAR = "visual_char"
    VISUAL_LINE = "visual_line"
    VISUAL_BLOCK = "visual_block"

    @property
    def is_visual(self) -> bool:
        return self in (EditorMode.VISUAL_CHAR, EditorMode.VISUAL_LINE, EditorMode.VISUAL_BLOCK)


@dataclass(frozen=True, slots=True)
class BufferInfo:
    """A buffer as listed by the host.

    Attributes:
        name: Buffer name as the host displays it (may be a pseudo name
            such as ``term://...``).
        path: Absolute file path backing the buffer, or None for buffers
            that are not files on disk.
        listed: Whether the buffer is listed (visible in the buffer list).
    """

    name: str
    path: str | None
    listed: bool = True


class EditorHost(Protocol):
    """Host editor collaborator.

    Implementations:
    - ConsoleHost: terminal console emulating a single-window editor
    """

    def mode(self) -> EditorMode:
        """Current interaction mode."""
        ...

    def buffer_lines(self) -> list[str]:
        """All lines of the current buffer, in order."""
        ...

    def selected_lines(self) -> list[str]:
        """Lines covered by the current visual selection, in buffer order."""
        ...

    def buffer_name(self) -> str:
        """Display name of the current buffer."""
        ...

    def file_type(self) -> str | None:
        """Language tag of the current buffer, or None when unknown."""
        ...

    def diagnostics(self) -> list[Diagnostic]:
        """Diagnostics reported for the current buffer."""
        ...

    def current_file_path(self) -> str | None:
        """Absolute path of the current buffer's file, or None."""
        ...

    def list_buffers(self) -> list[BufferInfo]:
        """All buffers known to the editor."""
        ...

    def notify(self, message: str, level: NotifyLevel = NotifyLevel.INFO) -> None:
        """Show a notification to the user."""
        ...

    async def prompt_for_text(self, prompt: str, *, default: str | None = None) -> str | None:
        """Ask the user for a line of text.

        Returns:
            The submitted text (possibly empty), or None if the user cancelled.
        """
        ...


@dataclass(frozen=True, slots=True)
class PickerItem:
    """One row in the command picker.

    ``category`` is ``"input"`` for commands that take an argument and
    ``"direct"`` for everything else.
    """

    text: str
    category: str
    description: str
    command: Command


class Picker(Protocol):
    """List-selection widget used by the command picker."""

    async def choose(self, items: Sequence[PickerItem], config: PickerConfig) -> PickerItem | None:
        """Display items and wait for a selection.

        Returns:
            The selected item, or None if the picker was dismissed.
        """
        ...

    def close(self) -> None:
        """Dismiss the picker; safe to call more than once."""
        ...
