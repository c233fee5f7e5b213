"""Operations and utilities for nested configuration dictionaries.

This module contains helper functions for:
- Splitting dot-notation key paths
- Getting, testing, setting and deleting nested values
- Merging dictionaries
- Parsing values
"""

from copy import deepcopy
from typing import Any, Dict, List

import yaml

from .api import KEY_SEPARATOR
from .errors import ConfigKeyError
from .logger import logger

__all__ = [
    "split_path",
    "get_nested_value",
    "has_nested_value",
    "set_nested_value",
    "delete_nested_value",
    "deep_merge",
    "parse_value",
]

# Marks a missing key during traversal, so that `None` values count as present
_MISSING = object()


def split_path(key_path: str) -> List[str]:
    """Split a dot-separated key path into its segments.

    Parameters
    ----------
    key_path : str
        Dot-separated path (e.g., "database.connections.default")

    Returns
    -------
    List[str]
        List of segments, empty if the path is malformed (empty path or
        empty segment, e.g. ".a", "a." or "a..b")
    """
    if not isinstance(key_path, str) or not key_path:
        return []

    keys = key_path.split(KEY_SEPARATOR)
    if "" in keys:
        return []

    return keys


def _lookup(config: Dict[str, Any], key_path: str) -> Any:
    """Walk a key path, returning the `_MISSING` sentinel on any miss."""
    keys = split_path(key_path)
    if not keys:
        return _MISSING

    current = config
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]

    return current


def get_nested_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """Fetch a nested value using dot notation.

    Parameters
    ----------
    config : Dict[str, Any]
        Configuration dictionary
    key_path : str
        Dot-separated path (e.g., "io.reader.batch_size")
    default : Any, optional
        Value returned if the path does not resolve

    Returns
    -------
    Any
        Value stored at the path, or `default`
    """
    value = _lookup(config, key_path)

    return default if value is _MISSING else value


def has_nested_value(config: Dict[str, Any], key_path: str) -> bool:
    """Check whether a dot-notation path resolves to an existing entry.

    An entry holding `None` exists.

    Parameters
    ----------
    config : Dict[str, Any]
        Configuration dictionary
    key_path : str
        Dot-separated path

    Returns
    -------
    bool
        True if the full path resolves
    """
    return _lookup(config, key_path) is not _MISSING


def set_nested_value(
    config: Dict[str, Any], key_path: str, value: Any
) -> Dict[str, Any]:
    """Set a nested value using dot notation.

    Missing intermediate dictionaries are created. An intermediate value which
    is not a dictionary is replaced by a new, empty dictionary.

    Parameters
    ----------
    config : Dict[str, Any]
        Configuration dictionary
    key_path : str
        Dot-separated path (e.g., "io.reader.file_paths")
    value : Any
        Value to set

    Returns
    -------
    Dict[str, Any]
        Modified configuration dictionary

    Raises
    ------
    ConfigKeyError
        If the key path is empty or contains an empty segment
    """
    keys = split_path(key_path)
    if not keys:
        raise ConfigKeyError(f"Cannot set '{key_path}': malformed key path")

    # Navigate to the parent of the target key
    current = config
    for key in keys[:-1]:
        if key not in current:
            current[key] = {}
        elif not isinstance(current[key], dict):
            logger.debug(
                "Replacing %s value at '%s' with a dictionary to set '%s'",
                type(current[key]).__name__,
                key,
                key_path,
            )
            current[key] = {}
        current = current[key]

    # Set the final value
    current[keys[-1]] = value

    return config


def delete_nested_value(config: Dict[str, Any], key_path: str) -> bool:
    """Delete a nested value using dot notation.

    Parameters
    ----------
    config : Dict[str, Any]
        Configuration dictionary
    key_path : str
        Dot-separated path

    Returns
    -------
    bool
        True if a value was removed, False if the path did not resolve
    """
    keys = split_path(key_path)
    if not keys:
        return False

    parent = _lookup(config, KEY_SEPARATOR.join(keys[:-1])) if len(keys) > 1 else config
    if not isinstance(parent, dict) or keys[-1] not in parent:
        return False

    del parent[keys[-1]]

    return True


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Combine two configuration trees into a new one.

    Where both trees hold a mapping under the same key, the two mappings are
    combined recursively. Anywhere else the entry of `override` takes the
    place of the entry of `base`. Neither input is modified.

    Parameters
    ----------
    base : Dict[str, Any]
        Configuration tree providing the defaults
    override : Dict[str, Any]
        Configuration tree whose entries take precedence

    Returns
    -------
    Dict[str, Any]
        Combined tree, sharing no mutable value with the inputs
    """
    merged = deepcopy(base)
    for key, value in override.items():
        current = merged.get(key, _MISSING)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)

    return merged


def parse_value(raw: Any) -> Any:
    """Interpret a command line override as a YAML scalar or collection.

    `"8"` gives `8`, `"true"` gives `True` and `"[1, 2]"` gives `[1, 2]`.
    Text which is blank or is not valid YAML is kept verbatim, as is any
    value which is not a string.
    """
    if not isinstance(raw, str) or not raw.strip():
        return raw

    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
