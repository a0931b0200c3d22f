"""Diagnostics as reported by the host, and the report sent to aider."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum


class Severity(IntEnum):
    """Diagnostic severity, ordered most severe first (LSP numbering)."""

    ERROR = 1
    WARNING = 2
    INFO = 3
    HINT = 4

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One diagnostic. ``lnum`` and ``col`` are zero-based."""

    lnum: int
    col: int
    message: str
    severity: Severity = Severity.ERROR
    source: str | None = None
    code: str | None = None


def format_diagnostic(diagnostic: Diagnostic) -> str:
    """Render one diagnostic as ``Line 3, Col 5: ERROR - msg [source:code]``."""
    line = (
        f"Line {diagnostic.lnum + 1}, Col {diagnostic.col + 1}: "
        f"{diagnostic.severity} - {diagnostic.message.strip()}"
    )
    if diagnostic.source and diagnostic.code:
        line += f" [{diagnostic.source}:{diagnostic.code}]"
    elif diagnostic.source or diagnostic.code:
        line += f" [{diagnostic.source or diagnostic.code}]"
    return line


def format_diagnostics(diagnostics: Iterable[Diagnostic]) -> str:
    """Render diagnostics one per line, in buffer order."""
    ordered = sorted(diagnostics, key=lambda d: (d.lnum, d.col, d.severity))
    return "\n".join(format_diagnostic(d) for d in ordered)
