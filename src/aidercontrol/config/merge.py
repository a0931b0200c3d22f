"""Config cascading and per-call override resolution.

File configs are merged as plain dicts (later overrides earlier). Per-call
overrides are merged the same way on top of an already typed Config, which
is why resolve_options() round-trips through the dict form.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from aidercontrol.config.convert import config_to_dict, dict_to_config

if TYPE_CHECKING:
    from aidercontrol.config.schema import Config


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Override values take precedence over base values, with these rules:
    - Nested dicts are recursively merged
    - Lists and tuples are replaced entirely (not concatenated)
    - None values in override do NOT override base (enables partial configs)
    - Other values are replaced

    Neither input is modified.
    """
    result = dict(base)

    for key, override_value in override.items():
        if override_value is None:
            continue

        base_value = result.get(key)
        if isinstance(base_value, Mapping) and isinstance(override_value, Mapping):
            result[key] = deep_merge(base_value, override_value)
        else:
            result[key] = override_value

    return result


def merge_configs(*configs: Mapping[str, Any]) -> dict[str, Any]:
    """Merge multiple config dicts in order (later overrides earlier)."""
    result: dict[str, Any] = {}
    for config in configs:
        if config:
            result = deep_merge(result, config)
    return result


def resolve_options(base: Config, overrides: Mapping[str, Any] | None = None) -> Config:
    """Return ``base ⊕ overrides`` as a new Config.

    ``base`` is returned unchanged when there is nothing to override.

    Example:
        >>> cfg = resolve_options(get_config(), {"auto_manage_context": True})
    """
    if not overrides:
        return base
    return dict_to_config(deep_merge(config_to_dict(base), overrides))
