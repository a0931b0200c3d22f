"""Where config.yaml files are looked up.

    system   /etc/aidercontrol/                %PROGRAMDATA%\\aidercontrol\\
    user     $XDG_CONFIG_HOME/aidercontrol/    %APPDATA%\\aidercontrol\\
             ~/.config/aidercontrol/ (if ~/.config exists), else ~/.aidercontrol/
    project  <session root>/.aidercontrol/
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

CONFIG_FILENAME = "config.yaml"
APP_NAME = "aidercontrol"
SHORT_NAME = ".aidercontrol"


def _in_env_dir(var: str) -> Path | None:
    base = os.environ.get(var)
    return Path(base) / APP_NAME / CONFIG_FILENAME if base else None


def get_system_config_path() -> Path | None:
    """System-wide config file (may not exist)."""
    if sys.platform == "win32":
        return _in_env_dir("PROGRAMDATA")
    return Path("/etc", APP_NAME, CONFIG_FILENAME)


def get_user_config_path() -> Path | None:
    """Per-user config file (may not exist)."""
    if sys.platform == "win32":
        return _in_env_dir("APPDATA")

    xdg = _in_env_dir("XDG_CONFIG_HOME")
    if xdg is not None:
        return xdg
    dot_config = Path.home() / ".config"
    if dot_config.exists():
        return dot_config / APP_NAME / CONFIG_FILENAME
    return Path.home() / SHORT_NAME / CONFIG_FILENAME


def get_project_config_path(session_root: str) -> Path:
    """Config file inside the project aider runs in (may not exist)."""
    return Path(session_root, SHORT_NAME, CONFIG_FILENAME)


def get_config_paths(session_root: str | None = None) -> list[Path]:
    """Candidate config files, lowest priority first."""
    candidates = [get_system_config_path(), get_user_config_path()]
    if session_root:
        candidates.append(get_project_config_path(session_root))
    return [path for path in candidates if path is not None]
