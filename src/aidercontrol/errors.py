"""Error taxonomy for controller operations.

Every error carries the notification level it is reported at. The session
controller catches these where they are detected and turns them into a
single user-visible notification; none of them escape to the host.
"""

from __future__ import annotations

from aidercontrol.protocols.host import NotifyLevel


class AiderControlError(Exception):
    """Base class for errors surfaced to the user as a notification."""

    level: NotifyLevel = NotifyLevel.ERROR


class MissingArgument(AiderControlError):
    """A file operation was invoked without a path."""


class EmptyInput(AiderControlError):
    """No valid buffers or paths were found to act on."""

    level = NotifyLevel.INFO


class UnknownCommand(AiderControlError):
    """Catalog lookup miss."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown aider command: {name}")
        self.name = name


class ProcessCreationFailed(AiderControlError):
    """The host could not start the assistant process."""

    def __init__(self, argv: list[str], reason: str) -> None:
        command = argv[0] if argv else "<empty>"
        super().__init__(f"Failed to start {command}: {reason}")
        self.argv = argv
        self.reason = reason


class NoDiagnostics(AiderControlError):
    """The current buffer has no diagnostics to send."""

    level = NotifyLevel.INFO
