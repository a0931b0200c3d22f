"""Configuration schema dataclasses for aidercontrol.

Every dataclass is frozen: a Config is a value. Per-call overrides never
mutate the loaded config, they produce a new one through resolve_options().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_COMMAND = "aider"
DEFAULT_ARGS: tuple[str, ...] = ("--no-auto-commits", "--pretty", "--stream")

# Regexes matched against buffer names; matching buffers are never added
DEFAULT_IGNORE_BUFFERS: tuple[str, ...] = (
    "^term://",
    "NeogitConsole",
    "NvimTree_",
    "neo-tree filesystem",
)


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    verbose: int | None = None  # 0-4, takes precedence over level
    file: str | None = None  # Log file path


@dataclass(frozen=True)
class PickerConfig:
    """Command picker presentation."""

    title: str = "Aider Commands"
    show_descriptions: bool = True


@dataclass(frozen=True)
class CommandConfig:
    """A user-registered catalog entry.

    Example config.yaml:
        commands:
          - name: review
            token: /ask
            input: true
            description: Ask for a review of the added files
    """

    name: str
    token: str
    input: bool = False
    description: str = ""


@dataclass(frozen=True)
class Config:
    """Root configuration object.

    The process-related keys (command, args, cwd, env, theme) are what the
    terminal session snapshots when it starts the assistant.
    """

    command: str = DEFAULT_COMMAND
    args: tuple[str, ...] = DEFAULT_ARGS
    cwd: str | None = None
    env: dict[str, str] = field(default_factory=dict)
    theme: dict[str, str] = field(default_factory=dict)  # e.g. user_input_color: "#a6da95"
    auto_manage_context: bool = False
    ignore_buffers: tuple[str, ...] = DEFAULT_IGNORE_BUFFERS
    picker: PickerConfig = field(default_factory=PickerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    commands: tuple[CommandConfig, ...] = ()

    # Unrecognized keys, kept for callers that extend the config
    extra: dict[str, Any] = field(default_factory=dict)
