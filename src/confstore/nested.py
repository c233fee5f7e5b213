"""Mapping with dot-notation access to nested values."""

from collections.abc import MutableMapping
from copy import deepcopy
from typing import Any, Dict, Iterable, Iterator, Optional

from .operations import (
    _MISSING,
    delete_nested_value,
    get_nested_value,
    has_nested_value,
    set_nested_value,
)

__all__ = ["NestedMap"]


class NestedMap(MutableMapping):
    """Ordered mapping of string keys whose values may be nested dictionaries.

    Every accessor takes a dot-delimited path, so that
    `nested["database.connections.default.host"]` reaches four levels down.
    A path without a dot is a plain top-level lookup.

    Writing below a value which is not a dictionary replaces that value with a
    new dictionary:

    .. code-block:: python

        nested.put("a.b", 1)
        nested.put("a.b.c", 2)  # a.b is now {"c": 2}
    """

    def __init__(self, items: Optional[Dict[str, Any]] = None):
        """Initialize the map.

        Parameters
        ----------
        items : Dict[str, Any], optional
            Initial top-level entries (stored as is, not copied)
        """
        self._items = items if items is not None else {}

    def get(self, key_path: str, default: Any = None) -> Any:
        """Value at a path, or `default` if the path does not resolve."""
        return get_nested_value(self._items, key_path, default)

    def has(self, key_path: str) -> bool:
        """Whether the path resolves to an entry (even one holding `None`)."""
        return has_nested_value(self._items, key_path)

    def put(self, key_path: str, value: Any) -> "NestedMap":
        """Store a value at a path, creating intermediate dictionaries.

        Parameters
        ----------
        key_path : str
            Dot-separated path
        value : Any
            Value to store

        Returns
        -------
        NestedMap
            Itself, to chain calls

        Raises
        ------
        ConfigKeyError
            If the path is empty or contains an empty segment
        """
        set_nested_value(self._items, key_path, value)

        return self

    def forget(self, key_path: str) -> "NestedMap":
        """Remove the entry at a path. Missing paths are ignored."""
        delete_nested_value(self._items, key_path)

        return self

    def all(self) -> Dict[str, Any]:
        """Underlying top-level dictionary (live reference)."""
        return self._items

    def to_dict(self) -> Dict[str, Any]:
        """Independent deep copy of the contents."""
        return deepcopy(self._items)

    def only(self, key_paths: Iterable[str]) -> Dict[str, Any]:
        """Subset of the contents addressed by a list of paths.

        Parameters
        ----------
        key_paths : Iterable[str]
            Dot-separated paths to keep. Paths which do not resolve are skipped.

        Returns
        -------
        Dict[str, Any]
            New nested dictionary holding copies of the selected values
        """
        subset = {}
        for key_path in key_paths:
            value = get_nested_value(self._items, key_path, _MISSING)
            if value is not _MISSING:
                set_nested_value(subset, key_path, deepcopy(value))

        return subset

    def __getitem__(self, key_path: str) -> Any:
        value = get_nested_value(self._items, key_path, _MISSING)
        if value is _MISSING:
            raise KeyError(key_path)

        return value

    def __setitem__(self, key_path: str, value: Any):
        self.put(key_path, value)

    def __delitem__(self, key_path: str):
        if not delete_nested_value(self._items, key_path):
            raise KeyError(key_path)

    def __contains__(self, key_path: object) -> bool:
        return isinstance(key_path, str) and self.has(key_path)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, NestedMap):
            return self._items == other._items
        if isinstance(other, dict):
            return self._items == other

        return NotImplemented

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"
