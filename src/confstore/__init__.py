"""Layered configuration container.

This package loads configuration documents (JSON, YAML) from files, strings or
folders of files into a single mapping accessed with dot-notation paths, and
compiles the result to a single artifact for fast reloads.

Main Entry Point
----------------
ConfigStore : Configuration container (see `confstore.store`)
"""

from .api import COMPILED_CONFIG_FILENAME, DEFAULT_MASK
from .errors import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigKeyError,
    FormatError,
    InvalidPathError,
    UnsupportedFormatError,
)
from .formats import ImportExport
from .nested import NestedMap
from .store import ConfigStore
from .version import __version__

__all__ = [
    "ConfigStore",
    "NestedMap",
    "ImportExport",
    "COMPILED_CONFIG_FILENAME",
    "DEFAULT_MASK",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigKeyError",
    "FormatError",
    "InvalidPathError",
    "UnsupportedFormatError",
]
