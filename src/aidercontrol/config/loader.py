"""Reading, layering and caching config.yaml files.

Layers, lowest priority first: system, user, project, an explicit file
given on the command line, then environment variables.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from aidercontrol.config.convert import dict_to_config
from aidercontrol.config.merge import merge_configs
from aidercontrol.config.paths import get_config_paths
from aidercontrol.config.schema import Config

_log = logging.getLogger("aidercontrol.config")

# Environment variable -> dotted config key
ENV_KEYS = {
    "AIDERCONTROL_LOG": "logging.file",
    "AIDERCONTROL_CMD": "command",
}

_cached_config: Config | None = None


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Parse one YAML file; missing, unreadable or non-mapping files give {}."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as e:
        _log.warning("Cannot read %s: %s", path, e)
        return {}

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    if data is not None and not isinstance(data, dict):
        _log.warning("Ignoring %s: top level is not a mapping", path)
        return {}
    return data or {}


def env_overrides() -> dict[str, Any]:
    """Config layer built from the ENV_KEYS variables that are set."""
    overrides: dict[str, Any] = {}
    for var, key in ENV_KEYS.items():
        value = os.environ.get(var)
        if not value:
            continue
        *parents, leaf = key.split(".")
        target = overrides
        for parent in parents:
            target = target.setdefault(parent, {})
        target[leaf] = value
    return overrides


def load_config(
    session_root: str | None = None,
    config_file: Path | None = None,
    reload: bool = False,
) -> Config:
    """Merge every config layer into a Config.

    Args:
        session_root: Project directory; adds its ``.aidercontrol/config.yaml``.
        config_file: Extra file applied after the project config.
        reload: Ignore the cache.

    Only the global config (neither argument given) is cached.
    """
    global _cached_config

    cacheable = session_root is None and config_file is None
    if cacheable and _cached_config is not None and not reload:
        return _cached_config

    paths = get_config_paths(session_root)
    if config_file is not None:
        paths.append(config_file)

    layers = []
    for path in paths:
        layer = load_yaml_file(path)
        if layer:
            _log.debug("Loaded config from %s", path)
            layers.append(layer)
    layers.append(env_overrides())

    config = dict_to_config(merge_configs(*layers))
    if cacheable:
        _cached_config = config
    return config


def get_config() -> Config:
    """The cached global config, loaded on first use."""
    return _cached_config if _cached_config is not None else load_config()


def reset_config() -> None:
    """Drop the cached global config."""
    global _cached_config
    _cached_config = None
