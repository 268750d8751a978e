"""Configuration file loading with inheritance and variable substitution.

A configuration file may name a parent through an ``extends`` key holding a
path relative to the file itself. The parent is loaded first and the child is
deep-merged over it.

Example:
    ```yaml
    # base.yaml
    fields:
      name:
        type: string

    # users.yaml
    extends: base.yaml
    name: users
    fields:
      email:
        type: string
        filters: [email]
    ```

    ```python
    config = load_config("configs/users.yaml")
    ```
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from .exceptions import CircularReferenceError, ConfigError, ConfigNotFoundError

logger = logging.getLogger(__name__)

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Nested dictionaries are merged recursively; all other values in
    ``override`` replace those in ``base``.

    Example:
        >>> deep_merge({"a": 1, "n": {"x": 1, "y": 2}}, {"a": 2, "n": {"y": 3}})
        {'a': 2, 'n': {'x': 1, 'y': 3}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def substitute_env_vars(data: Any) -> Any:
    """Recursively substitute environment variables in configuration.

    Supports ``${VAR_NAME}`` (required) and ``${VAR_NAME:default}``.

    Raises:
        ConfigError: If a required environment variable is not set
    """
    if isinstance(data, dict):
        return {k: substitute_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [substitute_env_vars(item) for item in data]
    elif isinstance(data, str):
        return _substitute_string(data)
    else:
        return data


def _substitute_string(value: str) -> str:
    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default_value = match.group(2)

        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value
        if default_value is not None:
            return default_value
        raise ConfigError(
            f"Required environment variable not set: {var_name}",
            context={"variable": var_name},
        )

    return _ENV_PATTERN.sub(replacer, value)


def load_config(
    source: str | Path | dict[str, Any],
    substitute_vars: bool = True,
) -> dict[str, Any]:
    """Load a configuration mapping from a dict or a YAML/JSON file.

    Args:
        source: Configuration dict, or path to a .yaml/.yml/.json file
        substitute_vars: Whether to substitute environment variables

    Returns:
        Resolved configuration dictionary

    Raises:
        ConfigNotFoundError: If a file (or an extended parent) is missing
        ConfigError: If a file cannot be parsed or is not a mapping
    """
    if isinstance(source, dict):
        config = dict(source)
    else:
        config = _load_file(Path(source), set())

    if substitute_vars:
        config = substitute_env_vars(config)

    return config


def _load_file(path: Path, loading: set[Path]) -> dict[str, Any]:
    path = path.resolve()
    if path in loading:
        raise CircularReferenceError(
            f"Circular inheritance detected: {path}",
            context={"path": str(path)},
        )
    if not path.exists():
        raise ConfigNotFoundError(
            f"Configuration file not found: {path}",
            context={"path": str(path)},
        )

    loading.add(path)
    try:
        data = _parse_file(path)

        parent = data.pop("extends", None)
        if parent:
            logger.debug(f"Config '{path.name}' extends '{parent}'")
            data = deep_merge(_load_file(path.parent / parent, loading), data)

        logger.info(f"Loaded configuration: {path}")
        return data
    finally:
        loading.discard(path)


def _parse_file(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to parse JSON file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(
            f"Configuration file must contain a mapping: {path}",
            context={"path": str(path)},
        )
    return data
