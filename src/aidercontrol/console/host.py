"""Terminal console implementation of the editor host.

Emulates a minimal single-window editor: buffers are files opened with
``:edit``, a line range can be selected to enter visual-line mode, and
diagnostics are annotations attached by hand with ``:diag``.
"""

from __future__ import annotations

import os
from pathlib import Path

from prompt_toolkit import PromptSession
from rich.console import Console

from aidercontrol.diagnostics import Diagnostic, Severity
from aidercontrol.protocols.host import BufferInfo, EditorMode, NotifyLevel

_LEVEL_STYLES = {
    NotifyLevel.DEBUG: "dim",
    NotifyLevel.INFO: "cyan",
    NotifyLevel.WARNING: "yellow",
    NotifyLevel.ERROR: "bold red",
}

_FILE_TYPES = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".lua": "lua",
    ".rs": "rust",
    ".go": "go",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".java": "java",
    ".rb": "ruby",
    ".sh": "sh",
    ".md": "markdown",
    ".toml": "toml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
}


class ConsoleHost:
    """EditorHost backed by prompt_toolkit input and rich output."""

    def __init__(
        self,
        session: PromptSession[str] | None = None,
        console: Console | None = None,
        cwd: str | None = None,
    ) -> None:
        self._session: PromptSession[str] = session or PromptSession()
        self._console = console or Console()
        self._cwd = Path(cwd or os.getcwd())
        self._buffers: dict[str, list[str]] = {}
        self._diagnostics: dict[str, list[Diagnostic]] = {}
        self._current: str | None = None
        self._selection: tuple[int, int] | None = None

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def open(self, path: str) -> BufferInfo:
        """Load a file into a buffer and make it current.

        Raises:
            OSError: If the file cannot be read.
        """
        resolved = (self._cwd / path).resolve()
        text = resolved.read_text(encoding="utf-8", errors="replace")
        key = str(resolved)
        self._buffers[key] = text.splitlines()
        self._current = key
        self._selection = None
        return self._info(key)

    def close(self, path: str | None = None) -> BufferInfo | None:
        """Close a buffer (the current one by default)."""
        key = str((self._cwd / path).resolve()) if path else self._current
        if key is None or key not in self._buffers:
            return None
        info = self._info(key)
        del self._buffers[key]
        self._diagnostics.pop(key, None)
        if self._current == key:
            self._current = next(iter(self._buffers), None)
            self._selection = None
        return info

    def select(self, start: int, end: int) -> None:
        """Select lines start..end (1-based, inclusive) in visual-line mode.

        Raises:
            ValueError: If there is no buffer or the range is out of bounds.
        """
        lines = self.buffer_lines()
        if self._current is None:
            raise ValueError("No buffer is open")
        if start > end:
            start, end = end, start
        if start < 1 or end > len(lines):
            raise ValueError(f"Range {start}-{end} is outside 1-{len(lines)}")
        self._selection = (start, end)

    def clear_selection(self) -> None:
        self._selection = None

    def add_diagnostic(
        self, line: int, message: str, severity: Severity = Severity.ERROR
    ) -> Diagnostic:
        """Attach a diagnostic to the current buffer at a 1-based line."""
        if self._current is None:
            raise ValueError("No buffer is open")
        diagnostic = Diagnostic(
            lnum=max(line - 1, 0), col=0, message=message, severity=severity, source="console"
        )
        self._diagnostics.setdefault(self._current, []).append(diagnostic)
        return diagnostic

    def clear_diagnostics(self) -> None:
        if self._current is not None:
            self._diagnostics.pop(self._current, None)

    def _info(self, key: str) -> BufferInfo:
        return BufferInfo(name=self._display_name(key), path=key)

    def _display_name(self, key: str) -> str:
        try:
            return str(Path(key).relative_to(self._cwd))
        except ValueError:
            return key

    # -------------------------------------------------------------------------
    # EditorHost
    # -------------------------------------------------------------------------

    def mode(self) -> EditorMode:
        return EditorMode.VISUAL_LINE if self._selection else EditorMode.NORMAL

    def buffer_lines(self) -> list[str]:
        if self._current is None:
            return []
        return list(self._buffers[self._current])

    def selected_lines(self) -> list[str]:
        if self._selection is None:
            return []
        start, end = self._selection
        return self.buffer_lines()[start - 1 : end]

    def buffer_name(self) -> str:
        if self._current is None:
            return "[No Name]"
        return self._display_name(self._current)

    def file_type(self) -> str | None:
        if self._current is None:
            return None
        return _FILE_TYPES.get(Path(self._current).suffix.lower())

    def diagnostics(self) -> list[Diagnostic]:
        if self._current is None:
            return []
        return list(self._diagnostics.get(self._current, []))

    def current_file_path(self) -> str | None:
        return self._current

    def list_buffers(self) -> list[BufferInfo]:
        return [self._info(key) for key in self._buffers]

    def notify(self, message: str, level: NotifyLevel = NotifyLevel.INFO) -> None:
        self._console.print(f"[{level}] {message}", style=_LEVEL_STYLES[level], markup=False)

    async def prompt_for_text(self, prompt: str, *, default: str | None = None) -> str | None:
        try:
            return await self._session.prompt_async(f"{prompt} ", default=default or "")
        except (KeyboardInterrupt, EOFError):
            return None
