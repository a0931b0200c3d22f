"""Conversion between raw config dicts and the typed Config dataclasses."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from aidercontrol.config.schema import (
    DEFAULT_ARGS,
    DEFAULT_COMMAND,
    DEFAULT_IGNORE_BUFFERS,
    CommandConfig,
    Config,
    LoggingConfig,
    PickerConfig,
)

_log = logging.getLogger("aidercontrol.config")

_KNOWN_KEYS = {
    "command",
    "args",
    "cwd",
    "env",
    "theme",
    "auto_manage_context",
    "ignore_buffers",
    "picker",
    "logging",
    "commands",
    "extra",
}


def _str_tuple(value: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def _str_dict(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items()}


def _commands(value: Any) -> tuple[CommandConfig, ...]:
    commands = []
    for entry in value or ():
        if not isinstance(entry, dict) or not entry.get("name") or not entry.get("token"):
            _log.warning("Ignoring malformed command entry: %r", entry)
            continue
        commands.append(
            CommandConfig(
                name=str(entry["name"]),
                token=str(entry["token"]),
                input=bool(entry.get("input", False)),
                description=str(entry.get("description", "")),
            )
        )
    return tuple(commands)


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert a merged dict to a typed Config.

    Lists coming from YAML become tuples; unknown top-level keys land in
    ``extra``.
    """
    picker_data = data.get("picker") or {}
    picker = PickerConfig(
        title=picker_data.get("title", PickerConfig.title),
        show_descriptions=bool(
            picker_data.get("show_descriptions", PickerConfig.show_descriptions)
        ),
    )

    log_data = data.get("logging") or {}
    logging_config = LoggingConfig(
        level=log_data.get("level"),
        verbose=log_data.get("verbose"),
        file=log_data.get("file"),
    )

    extra = dict(data.get("extra") or {})
    extra.update({k: v for k, v in data.items() if k not in _KNOWN_KEYS})

    return Config(
        command=data.get("command") or DEFAULT_COMMAND,
        args=_str_tuple(data.get("args"), DEFAULT_ARGS),
        cwd=data.get("cwd"),
        env=_str_dict(data.get("env")),
        theme=_str_dict(data.get("theme")),
        auto_manage_context=bool(data.get("auto_manage_context", False)),
        ignore_buffers=_str_tuple(data.get("ignore_buffers"), DEFAULT_IGNORE_BUFFERS),
        picker=picker,
        logging=logging_config,
        commands=_commands(data.get("commands")),
        extra=extra,
    )


def config_to_dict(config: Config) -> dict[str, Any]:
    """Convert a Config back to plain dicts (tuples stay tuples)."""
    return dataclasses.asdict(config)
