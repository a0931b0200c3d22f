"""Configuration management for aidercontrol.

Hierarchical YAML configuration (system, user, project, environment) merged
into a frozen Config. Per-call overrides are applied with resolve_options(),
which returns a new Config and leaves the original untouched.

Example usage:
    from aidercontrol.config import get_config, resolve_options

    base = get_config()
    opts = resolve_options(base, {"auto_manage_context": True})
"""

from aidercontrol.config.convert import config_to_dict, dict_to_config
from aidercontrol.config.loader import (
    get_config,
    load_config,
    reset_config,
)
from aidercontrol.config.merge import deep_merge, merge_configs, resolve_options
from aidercontrol.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)
from aidercontrol.config.schema import (
    CommandConfig,
    Config,
    LoggingConfig,
    PickerConfig,
)

__all__ = [
    "Config",
    "load_config",
    "get_config",
    "reset_config",
    "resolve_options",
    "deep_merge",
    "merge_configs",
    "config_to_dict",
    "dict_to_config",
    "CommandConfig",
    "LoggingConfig",
    "PickerConfig",
    "get_config_paths",
    "get_system_config_path",
    "get_user_config_path",
    "get_project_config_path",
]
