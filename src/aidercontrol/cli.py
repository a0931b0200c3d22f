"""Command-line interface for aidercontrol."""

from __future__ import annotations

import argparse
import asyncio
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from aidercontrol import __version__
from aidercontrol.config import load_config, resolve_options
from aidercontrol.logging import get_logger, setup_logging

log = get_logger()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="aidercontrol",
        description="Drive an aider chat session from a terminal console",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (can be repeated)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Extra config file, applied after system, user and project config",
    )
    parser.add_argument(
        "--cwd",
        help="Project directory aider runs in (default: current directory)",
    )
    parser.add_argument(
        "--command",
        dest="aider_command",
        help="Assistant executable (default: aider)",
    )
    parser.add_argument(
        "--arg",
        dest="aider_args",
        action="append",
        help="Argument passed to aider; replaces the configured args (repeatable)",
    )
    parser.add_argument(
        "--auto-manage-context",
        action="store_true",
        default=None,
        help="Add open buffers to the session automatically",
    )
    parser.add_argument(
        "--history",
        type=Path,
        help="File to keep REPL input history in",
    )
    parser.add_argument(
        "files",
        nargs="*",
        help="Files to open as buffers at startup",
    )
    return parser


def cli_overrides(parsed: argparse.Namespace) -> dict[str, Any]:
    """Config overrides from parsed arguments (unset options are left out)."""
    overrides: dict[str, Any] = {
        "cwd": parsed.cwd,
        "command": parsed.aider_command,
        "args": parsed.aider_args,
        "auto_manage_context": parsed.auto_manage_context,
    }
    if parsed.verbose:
        # -v = verbose, -vv = trace
        overrides["logging"] = {"verbose": min(2 + parsed.verbose, 4)}
    return {k: v for k, v in overrides.items() if v is not None}


def run_cli(args: Sequence[str]) -> int:
    """Run the CLI with the given arguments."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    session_root = os.path.abspath(parsed.cwd or os.getcwd())
    config = load_config(session_root=session_root, config_file=parsed.config)
    config = resolve_options(config, cli_overrides(parsed))
    if config.cwd is None:
        config = resolve_options(config, {"cwd": session_root})

    setup_logging(config.logging)
    log.debug("Starting with config: %s", config)

    from aidercontrol.console.repl import run_repl

    try:
        return asyncio.run(run_repl(config, parsed.files, parsed.history))
    except KeyboardInterrupt:
        return 130
