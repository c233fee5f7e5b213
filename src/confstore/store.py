"""Configuration container with folder import and compilation.

A `ConfigStore` gathers configuration documents into a single mapping which is
accessed with dot-notation paths:

.. code-block:: python

    config = ConfigStore.create_from_folder("config/")
    host = config.get("database.connections.default.host", "localhost")

Folder import
-------------
Each file found in a folder contributes one top-level entry, keyed by the file
name without its extension (`config/database.yaml` -> `database`). Files are
processed in lexicographic order of their names and the first file to define a
key wins: a key which already exists in the store is never overwritten by a
file import.

Compilation
-----------
`ConfigStore.compile` writes the entire store to a single JSON artifact
(`_compiled.json_` by default). When a folder is imported with the default
mask and holds such an artifact, the artifact is loaded instead of the
individual files. Recompile (or delete the artifact) after editing the files.

Instances are not thread-safe; concurrent mutation must be serialized by the
caller.
"""

import glob
import os
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from .api import (
    ALL_KEYS,
    COMPILED_CONFIG_FILENAME,
    COMPILED_FORMAT,
    COMPILED_KEY,
    DEFAULT_MASK,
)
from .errors import (
    ConfigFileNotFoundError,
    ConfigKeyError,
    FormatError,
    InvalidPathError,
)
from .formats import ImportExport, Source
from .logger import logger
from .nested import NestedMap
from .operations import deep_merge, split_path

__all__ = ["ConfigStore"]


class ConfigStore(MutableMapping):
    """Central container for configuration settings.

    Attributes
    ----------
    data : NestedMap
        Storage for every configuration entry
    formats : ImportExport
        Decoders and encoders used to read and write documents
    """

    def __init__(
        self,
        items: Optional[Dict[str, Any]] = None,
        base_path: Optional[Source] = None,
        formats: Optional[ImportExport] = None,
    ):
        """Initialize the store.

        Parameters
        ----------
        items : Dict[str, Any], optional
            Initial entries, imported with `import_array`
        base_path : Union[str, os.PathLike], optional
            Directory against which relative file names are resolved
        formats : ImportExport, optional
            Format handler to use instead of the default JSON/YAML one

        Raises
        ------
        InvalidPathError
            If `base_path` is not an existing directory
        """
        self.data = NestedMap()
        self.formats = formats if formats is not None else ImportExport()
        self._base_path = ""

        if base_path is not None:
            self.set_base_path(base_path)
        if items is not None:
            self.import_array(items)

    @property
    def base_path(self) -> str:
        """Directory against which relative file names are resolved."""
        return self._base_path

    def set_base_path(self, path: Source) -> "ConfigStore":
        """Set the base path, which must be an existing directory.

        Raises
        ------
        InvalidPathError
            If the path is not a directory (the base path is left unchanged)
        """
        if not os.path.isdir(path):
            raise InvalidPathError(
                f"Config base path `{os.fspath(path)}` does not exist."
            )

        self._base_path = os.fspath(path)

        return self

    def get(self, key_path: str, default: Any = None) -> Any:
        """Value at a dot-path, or `default` if it does not resolve."""
        return self.data.get(key_path, default)

    def has(self, key_path: str) -> bool:
        """Whether a dot-path resolves to an entry."""
        return self.data.has(key_path)

    def put(self, key_path: str, value: Any) -> "ConfigStore":
        """Store a value at a dot-path, creating intermediate dictionaries."""
        self.data.put(key_path, value)

        return self

    def forget(self, key_path: str) -> "ConfigStore":
        """Remove the entry at a dot-path, if any."""
        self.data.forget(key_path)

        return self

    def all(self) -> Dict[str, Any]:
        """Underlying top-level dictionary (live reference)."""
        return self.data.all()

    def to_dict(self) -> Dict[str, Any]:
        """Independent deep copy of the contents."""
        return self.data.to_dict()

    def import_array(self, import_dict: Dict[str, Any]) -> "ConfigStore":
        """Put every top-level entry of a dictionary, overwriting existing ones."""
        for key, value in import_dict.items():
            self.put(key, value)

        return self

    def merge(self, override: Dict[str, Any]) -> "ConfigStore":
        """Recursively merge a dictionary into the store.

        Nested dictionaries are merged key by key, any other value in
        `override` replaces the stored one.
        """
        merged = deep_merge(self.data.all(), override)
        self.data.all().clear()
        self.data.all().update(merged)

        return self

    def import_json(self, source: Source, key: Optional[str] = None) -> Any:
        """Import a JSON file or string.

        Parameters
        ----------
        source : Union[str, os.PathLike]
            Path to a JSON file (absolute, or relative to the base path) or
            a raw JSON string
        key : str, optional
            Dot-path under which to store the document. If not specified, the
            top-level entries of the document are imported.

        Returns
        -------
        Any
            Decoded document. Only dictionaries are stored.

        Raises
        ------
        ConfigFileNotFoundError
            If the source names a file which does not exist
        FormatError
            If the document is malformed
        """
        data = self.formats.read_json(self._locate(source))
        self._absorb(data, key, source)

        return data

    def import_yaml(self, source: Source, key: Optional[str] = None) -> Any:
        """Import a YAML file or string. See `import_json`."""
        data = self.formats.read_yaml(self._locate(source))
        self._absorb(data, key, source)

        return data

    def import_file(self, path: Source, key: Optional[str] = None) -> "ConfigStore":
        """Import a single configuration file, decoded according to its extension.

        The file is stored under `key`, which defaults to the file name
        without its extension. Nothing is read if that key already exists.

        Parameters
        ----------
        path : Union[str, os.PathLike]
            Path to the file (absolute, or relative to the base path)
        key : str, optional
            Dot-path under which to store the file content

        Returns
        -------
        ConfigStore
            Itself, to chain calls

        Raises
        ------
        UnsupportedFormatError
            If the file extension is not supported
        ConfigFileNotFoundError
            If the file does not exist
        FormatError
            If the file content is malformed
        ConfigKeyError
            If the key is not a valid dot-path (e.g. `a.` derived from
            `a..yaml`). The file is not read.
        """
        self.formats.format_for(path)
        file_path = self._resolve(path)
        key = key if key is not None else self._config_key(file_path)
        if not split_path(key):
            raise ConfigKeyError(
                f"Cannot import {file_path} under malformed key `{key}`"
            )

        if self.data.has(key):
            logger.debug("Config key `%s` already exists, skipping %s", key, file_path)
            return self

        data = self.formats.read_file(file_path)
        self._absorb(data, key, file_path)

        return self

    def import_folder(
        self, base_path: Source, mask: str = DEFAULT_MASK
    ) -> "ConfigStore":
        """Import (merge) the configuration files found in a directory.

        If the default mask is used and the directory holds a compiled
        artifact, only the artifact is loaded. Otherwise every file matching
        the mask is imported under its base name, in lexicographic order.
        Files whose key already exists are skipped.

        The import is all-or-nothing: if any file fails to load, the store
        is left untouched.

        Parameters
        ----------
        base_path : Union[str, os.PathLike]
            Directory to scan (not recursive)
        mask : str, optional
            Glob pattern of the files to import

        Returns
        -------
        ConfigStore
            Itself, to chain calls

        Raises
        ------
        InvalidPathError
            If the directory does not exist
        UnsupportedFormatError
            If a matched file has an unsupported extension
        FormatError
            If a matched file is malformed
        """
        if not os.path.isdir(base_path):
            raise InvalidPathError(
                f"Config folder `{os.fspath(base_path)}` does not exist."
            )

        # Load the compiled artifact instead of the individual files, if present
        if mask == DEFAULT_MASK and self.is_compiled(base_path):
            logger.debug("Loading compiled configuration from %s", base_path)
            return self.import_compiled_file(base_path)

        # The staging map mirrors the claimed keys, documents are committed
        # one by one so that a dotted key extends an existing mapping
        staged = NestedMap()
        imports = []
        for file_path in self._parse_folder(base_path, mask):
            key = self._config_key(file_path)
            if not split_path(key):
                logger.debug("Skipping %s, `%s` is not a valid key", file_path, key)
                continue
            if self.data.has(key) or staged.has(key):
                logger.debug(
                    "Config key `%s` already exists, skipping %s", key, file_path
                )
                continue

            data = self.formats.read_file(file_path)
            if isinstance(data, dict):
                logger.debug("Imported %s as `%s`", file_path, key)
                staged.put(key, data)
                imports.append((key, data))
            else:
                logger.debug("Discarding %s, content is not a mapping", file_path)

        # Commit only once every file was decoded
        for key, data in imports:
            self.put(key, data)

        return self

    def is_compiled(
        self, base_path: Source, compiled_filename: str = COMPILED_CONFIG_FILENAME
    ) -> bool:
        """Whether a directory holds a compiled configuration artifact."""
        return os.path.isfile(os.path.join(base_path, compiled_filename))

    def import_compiled_file(
        self, base_path: Source, compiled_filename: str = COMPILED_CONFIG_FILENAME
    ) -> "ConfigStore":
        """Load a compiled artifact, overwriting the top-level keys it defines.

        Raises
        ------
        ConfigFileNotFoundError
            If the artifact does not exist
        FormatError
            If the artifact is malformed or does not hold a mapping
        """
        file_path = os.path.join(base_path, compiled_filename)
        data = self.formats.read(Path(file_path), COMPILED_FORMAT)
        if not isinstance(data, dict):
            raise FormatError(file_path, "compiled configuration is not a mapping")

        for key, item in data.items():
            self.data.all()[key] = item

        return self

    def compile(self, path: Source, filename: str = COMPILED_CONFIG_FILENAME) -> str:
        """Compile the store contents to a single file in the given directory.

        Unless the store already holds a `compiled` entry, the artifact
        records its own path under that key. The entry only exists in the
        artifact, not in the store.

        Parameters
        ----------
        path : Union[str, os.PathLike]
            Existing directory in which to write the artifact
        filename : str, optional
            Artifact file name

        Returns
        -------
        str
            Path to the written artifact
        """
        added = not self.data.has(COMPILED_KEY)
        if added:
            self.data.put(COMPILED_KEY, os.path.join(path, filename))

        try:
            output_path = self.formats.export_file(
                self.data, path, ALL_KEYS, filename, COMPILED_FORMAT
            )
        finally:
            if added:
                self.data.forget(COMPILED_KEY)

        logger.info("Compiled %d configuration entries to %s", len(self), output_path)

        return output_path

    def export_file(
        self,
        path: Source,
        key_filter: Union[str, Iterable[str]] = ALL_KEYS,
        filename: str = COMPILED_CONFIG_FILENAME,
        fmt: str = COMPILED_FORMAT,
    ) -> str:
        """Write a selection of entries to a file. See `ImportExport.export_file`."""
        return self.formats.export_file(self.data, path, key_filter, filename, fmt)

    @classmethod
    def create_from_folder(
        cls, folder: Source, mask: str = DEFAULT_MASK
    ) -> "ConfigStore":
        """Build a store from the configuration files of a directory."""
        return cls().import_folder(folder, mask)

    @classmethod
    def create_from_file(cls, path: Source) -> "ConfigStore":
        """Build a store from a single configuration file."""
        return cls().import_file(path)

    @classmethod
    def create_from_json(cls, source: Source) -> "ConfigStore":
        """Build a store from a JSON file or string."""
        config = cls()
        config.import_json(source)

        return config

    @classmethod
    def create_from_yaml(cls, source: Source) -> "ConfigStore":
        """Build a store from a YAML file or string."""
        config = cls()
        config.import_yaml(source)

        return config

    def _absorb(self, data: Any, key: Optional[str], source: Source):
        """Store a decoded document if it is a mapping."""
        if not isinstance(data, dict):
            logger.debug("Discarding %s, content is not a mapping", source)
            return

        if key is None:
            self.import_array(data)
        else:
            self.put(key, data)

    def _locate(self, source: Source) -> Source:
        """Prefix a relative file name with the base path when it exists there."""
        if self._base_path and not os.path.isfile(source):
            candidate = os.path.join(self._base_path, source)
            if os.path.isfile(candidate):
                return candidate

        return source

    def _resolve(self, path: Source) -> str:
        """Path to an existing configuration file, tried as is then in the base path."""
        located = os.fspath(self._locate(path))
        if not os.path.isfile(located):
            raise ConfigFileNotFoundError(f"Config file {located} does not exist.")

        return located

    @staticmethod
    def _config_key(file_path: Source) -> str:
        """Top-level key of a file: its base name without the extension."""
        return os.path.splitext(os.path.basename(file_path))[0]

    @staticmethod
    def _parse_folder(base_path: Source, mask: str) -> List[str]:
        """Sorted list of the regular files of a directory matching a mask."""
        base_path = os.path.realpath(base_path)
        paths = glob.glob(os.path.join(glob.escape(base_path), mask))

        return sorted(
            path
            for path in paths
            if os.path.isfile(path)
            and os.path.basename(path) != COMPILED_CONFIG_FILENAME
        )

    def __getitem__(self, key_path: str) -> Any:
        return self.data[key_path]

    def __setitem__(self, key_path: str, value: Any):
        self.data[key_path] = value

    def __delitem__(self, key_path: str):
        del self.data[key_path]

    def __contains__(self, key_path: object) -> bool:
        return key_path in self.data

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.data.all()!r})"
