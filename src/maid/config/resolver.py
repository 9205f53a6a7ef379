"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import MaidConfig

ENV_PREFIX = "MAID__"


def resolve_with_precedence(
    *,
    defaults: MaidConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> MaidConfig:
    """Merge configuration layers; later layers win (defaults, file, environment, CLI).

    Args:
        defaults: Baseline configuration.
        file_overrides: Values read from the YAML configuration file.
        env_overrides: Nested values extracted from ``MAID__`` environment variables.
        cli_overrides: Values supplied by command-line flags; keys may be dotted paths.

    Returns:
        MaidConfig: Validated configuration.

    Raises:
        ConfigError: If a layer is malformed or the merged values fail validation.
    """
    merged: dict[str, Any] = defaults.model_dump(mode="python")
    layers = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for layer_name, layer in layers:
        if layer is None:
            continue
        merged = _deep_merge(merged, expand_dotted(layer, layer_name=layer_name))

    try:
        return MaidConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: MaidConfig) -> Dict[str, str]:
    """Render the config as ``MAID__SECTION__KEY`` environment variable assignments."""
    flat: Dict[str, str] = {}
    for section, values in config.model_dump(mode="json").items():
        for key, value in values.items():
            env_key = f"{ENV_PREFIX}{section.upper()}__{key.upper()}"
            if isinstance(value, (dict, list)):
                flat[env_key] = yaml.safe_dump(value, default_flow_style=True).strip()
            elif value is None:
                flat[env_key] = "null"
            else:
                flat[env_key] = str(value).lower() if isinstance(value, bool) else str(value)
    return flat


def expand_dotted(source: Mapping[str, Any], *, layer_name: str = "override") -> dict[str, Any]:
    """Expand ``{"a.b": 1}`` style keys into nested dictionaries.

    Raises:
        ConfigError: If the source is not a mapping, a key is not a string, or a dotted
            path runs through a scalar value.
    """
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{layer_name.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{layer_name.capitalize()} override keys must be strings.")
        segments = key.split(".")
        node = expanded
        for segment in segments[:-1]:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(
                    f"{layer_name.capitalize()} override for {key} conflicts with an "
                    "existing value."
                )
            node = child
        if isinstance(value, MappingABC):
            value = expand_dotted(value, layer_name=layer_name)
            existing = node.get(segments[-1])
            if isinstance(existing, dict):
                value = _deep_merge(existing, value)
        node[segments[-1]] = value
    return expanded


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = deepcopy(dict(base))
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["ENV_PREFIX", "expand_dotted", "flatten_for_env", "resolve_with_precedence"]
