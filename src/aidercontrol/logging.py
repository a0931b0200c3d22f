"""Logging for aidercontrol.

The REPL owns stdout (aider output and prompts are drawn there), so log
records never go to stdout. They go to a file when one is configured (config
``logging.file`` or the AIDERCONTROL_LOG environment variable) and otherwise
to stderr, but only when stderr is an interactive terminal.

Verbosity runs from 0 (errors only) to 4 (trace); ``-v`` on the command line
starts at 3.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aidercontrol.config.schema import LoggingConfig

TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

logger = logging.getLogger("aidercontrol")

LOG_ENV_VAR = "AIDERCONTROL_LOG"

# Index is the verbosity; anything past the end means everything
_VERBOSITY_LEVELS = (logging.ERROR, logging.WARNING, logging.INFO, VERBOSE, TRACE)

_NAMED_LEVELS = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "VERBOSE": VERBOSE,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_handlers: list[logging.Handler] = []


class _LowercaseLevelFormatter(logging.Formatter):
    """``12:30:01 info: Started assistant process 4242: aider``"""

    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        return super().format(record)


def resolve_level(config: LoggingConfig | None) -> int:
    """Effective level; ``verbose`` wins over ``level``."""
    if config is None:
        return logging.INFO
    if config.verbose is not None:
        if config.verbose < 0:
            return logging.ERROR
        return _VERBOSITY_LEVELS[min(config.verbose, len(_VERBOSITY_LEVELS) - 1)]
    if config.level:
        return _NAMED_LEVELS.get(config.level.upper(), logging.INFO)
    return logging.INFO


def log_file_path(config: LoggingConfig | None) -> str | None:
    """Configured log file, falling back to AIDERCONTROL_LOG."""
    path = (config.file if config else None) or os.environ.get(LOG_ENV_VAR)
    return os.path.expanduser(path) if path else None


def _open_handler(path: str | None) -> logging.Handler | None:
    if path:
        try:
            return logging.FileHandler(path, mode="a", encoding="utf-8")
        except OSError as e:
            if sys.stderr.isatty():
                print(f"[aidercontrol] Cannot open log file {path}: {e}", file=sys.stderr)
    if sys.stderr.isatty():
        return logging.StreamHandler(sys.stderr)
    return None


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Install the aidercontrol handler. Only the first call has an effect."""
    if _handlers:
        return

    level = resolve_level(config)
    logger.setLevel(level)

    handler = _open_handler(log_file_path(config))
    if handler is None:
        # Keep records from reaching the root logger's lastResort handler
        handler = logging.NullHandler()
    handler.setLevel(level)
    handler.setFormatter(
        _LowercaseLevelFormatter("%(asctime)s %(levelname)s: %(message)s", datefmt="%H:%M:%S")
    )
    logger.addHandler(handler)
    _handlers.append(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """The aidercontrol logger, or its child ``aidercontrol.<name>``."""
    return logger.getChild(name) if name else logger
