"""aidercontrol: editor-side controller for an aider chat session."""

__version__ = "0.1.0"

# Public API
from aidercontrol.commands import ArgCommand, Command, CommandCatalog, FixedCommand
from aidercontrol.config import Config, get_config, load_config, resolve_options
from aidercontrol.diagnostics import Diagnostic, Severity, format_diagnostics
from aidercontrol.errors import (
    AiderControlError,
    EmptyInput,
    MissingArgument,
    NoDiagnostics,
    ProcessCreationFailed,
    UnknownCommand,
)
from aidercontrol.protocols import BufferInfo, EditorHost, EditorMode, NotifyLevel, Picker, PickerItem
from aidercontrol.session import (
    ActionResult,
    ActionStatus,
    FileRegistry,
    InputResolver,
    PayloadSource,
    SessionController,
)
from aidercontrol.terminal import SubprocessLauncher, TerminalSession

__all__ = [
    # Controller
    "SessionController",
    "ActionResult",
    "ActionStatus",
    "FileRegistry",
    "InputResolver",
    "PayloadSource",
    # Terminal
    "TerminalSession",
    "SubprocessLauncher",
    # Commands
    "Command",
    "CommandCatalog",
    "FixedCommand",
    "ArgCommand",
    # Diagnostics
    "Diagnostic",
    "Severity",
    "format_diagnostics",
    # Host protocols
    "BufferInfo",
    "EditorHost",
    "EditorMode",
    "NotifyLevel",
    "Picker",
    "PickerItem",
    # Config
    "Config",
    "get_config",
    "load_config",
    "resolve_options",
    # Errors
    "AiderControlError",
    "EmptyInput",
    "MissingArgument",
    "NoDiagnostics",
    "ProcessCreationFailed",
    "UnknownCommand",
]
