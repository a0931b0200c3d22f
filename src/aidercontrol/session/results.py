"""Outcome of a controller operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ActionStatus(Enum):
    """How a controller operation ended.

    - OK: the payload or command was written to the process
    - INFO: nothing to do; the user was told why (e.g. no diagnostics)
    - CANCELLED: the user dismissed a prompt or the picker
    - SKIPPED: an editor event that did not apply (auto-management off)
    - ERROR: malformed input or environment; the user was notified
    """

    OK = "ok"
    INFO = "info"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Result returned by every SessionController operation.

    Attributes:
        status: How the operation ended.
        message: Notification text shown to the user, if any.
        payload: Text or command line written to the process, if any.
    """

    status: ActionStatus
    message: str | None = None
    payload: str | None = None

    @property
    def sent(self) -> bool:
        return self.status is ActionStatus.OK and self.payload is not None

    def __repr__(self) -> str:
        if self.message:
            return f"<ActionResult {self.status}: {self.message}>"
        return f"<ActionResult {self.status}>"
