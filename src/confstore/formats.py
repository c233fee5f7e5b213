"""Import and export of configuration documents.

This module converts between in-memory mappings and their textual
representations. Two formats are registered by default:

- JSON (.json), decoded with the standard `json` module
- YAML (.yaml, .yml), decoded with PyYAML's safe loader

Documents are only ever decoded with data-only parsers, never executed.
Additional formats can be registered on an `ImportExport` instance with
`ImportExport.register`.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Union

import yaml

from .api import (
    ALL_KEYS,
    COMPILED_CONFIG_FILENAME,
    COMPILED_FORMAT,
    EXTENSIONS,
    FORMAT_JSON,
    FORMAT_YAML,
)
from .errors import (
    ConfigFileNotFoundError,
    FormatError,
    InvalidPathError,
    UnsupportedFormatError,
)
from .logger import logger
from .nested import NestedMap

__all__ = ["ImportExport"]

Source = Union[str, os.PathLike]


def _encode_json(data: Any) -> str:
    # Scalars JSON cannot represent (e.g. YAML dates) are written as strings
    text = json.dumps(data, indent=4, default=str, ensure_ascii=False)

    return text + "\n"


def _encode_yaml(data: Any) -> str:
    return yaml.safe_dump(
        data, default_flow_style=False, sort_keys=False, allow_unicode=True
    )


class ImportExport:
    """Reads and writes configuration documents in the registered formats.

    Attributes
    ----------
    extensions : Dict[str, str]
        Maps lower case file extensions (with the dot) onto format names
    decoders : Dict[str, Callable[[str], Any]]
        Maps format names onto functions turning text into data
    encoders : Dict[str, Callable[[Any], str]]
        Maps format names onto functions turning data into text
    """

    def __init__(self):
        """Register the default JSON and YAML formats."""
        self.extensions: Dict[str, str] = dict(EXTENSIONS)
        self.decoders: Dict[str, Callable[[str], Any]] = {
            FORMAT_JSON: json.loads,
            FORMAT_YAML: yaml.safe_load,
        }
        self.encoders: Dict[str, Callable[[Any], str]] = {
            FORMAT_JSON: _encode_json,
            FORMAT_YAML: _encode_yaml,
        }

    def register(
        self,
        extension: str,
        name: str,
        decode: Callable[[str], Any],
        encode: Optional[Callable[[Any], str]] = None,
    ):
        """Register a new format (or a new extension for an existing one).

        Parameters
        ----------
        extension : str
            File extension, with or without the leading dot
        name : str
            Format name
        decode : Callable[[str], Any]
            Function which turns a document into data. It must raise a
            `ValueError` (or a subclass) on malformed input.
        encode : Callable[[Any], str], optional
            Function which turns data into a document
        """
        if not extension.startswith("."):
            extension = f".{extension}"

        self.extensions[extension.lower()] = name
        self.decoders[name] = decode
        if encode is not None:
            self.encoders[name] = encode

    def format_for(self, path: Source) -> str:
        """Name of the format associated with a file extension.

        Parameters
        ----------
        path : Union[str, os.PathLike]
            Path to a configuration file

        Returns
        -------
        str
            Format name

        Raises
        ------
        UnsupportedFormatError
            If the extension is not registered
        """
        extension = os.path.splitext(os.fspath(path))[1].lower()
        if extension not in self.extensions:
            raise UnsupportedFormatError(
                f"Unsupported configuration file extension: `{extension}` ({path})"
            )

        return self.extensions[extension]

    def decode(self, text: str, fmt: str, source: str = "<string>") -> Any:
        """Decode a document.

        Parameters
        ----------
        text : str
            Document content
        fmt : str
            Format name
        source : str, optional
            Where the document comes from, for error messages

        Returns
        -------
        Any
            Decoded data

        Raises
        ------
        UnsupportedFormatError
            If the format is not registered
        FormatError
            If the document is malformed
        """
        if fmt not in self.decoders:
            raise UnsupportedFormatError(f"Unsupported configuration format: `{fmt}`")

        try:
            return self.decoders[fmt](text)
        except (ValueError, yaml.YAMLError) as err:
            raise FormatError(source, str(err)) from err

    def dump(self, data: Any, fmt: str = COMPILED_FORMAT) -> str:
        """Encode data as a document in the requested format."""
        if fmt not in self.encoders:
            raise UnsupportedFormatError(f"Cannot export to format `{fmt}`")

        return self.encoders[fmt](data)

    def read(self, source: Source, fmt: str) -> Any:
        """Decode a file path or a raw document in a given format.

        A string is treated as a path if it names an existing file, or if it
        is a bare token (no whitespace, braces or brackets) ending with one of
        the format's extensions.

        Parameters
        ----------
        source : Union[str, os.PathLike]
            Path to a file or raw document
        fmt : str
            Format name

        Returns
        -------
        Any
            Decoded data

        Raises
        ------
        ConfigFileNotFoundError
            If the source names a file which does not exist
        FormatError
            If the document is malformed
        """
        if not self._is_path(source, fmt):
            return self.decode(source, fmt)

        path = os.fspath(source)
        if not os.path.isfile(path):
            raise ConfigFileNotFoundError(f"Config file {path} does not exist.")

        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except UnicodeDecodeError as err:
            raise FormatError(path, str(err)) from err

        return self.decode(text, fmt, source=path)

    def read_json(self, source: Source) -> Any:
        """Decode a JSON file path or a raw JSON string."""
        return self.read(source, FORMAT_JSON)

    def read_yaml(self, source: Source) -> Any:
        """Decode a YAML file path or a raw YAML string."""
        return self.read(source, FORMAT_YAML)

    def read_file(self, path: Source) -> Any:
        """Decode a file according to its extension.

        Raises
        ------
        UnsupportedFormatError
            If the extension is not registered (the file is not opened)
        ConfigFileNotFoundError
            If the file does not exist
        FormatError
            If the document is malformed
        """
        fmt = self.format_for(path)

        return self.read(Path(path), fmt)

    def export_file(
        self,
        items: NestedMap,
        path: Source,
        key_filter: Union[str, Iterable[str]] = ALL_KEYS,
        filename: str = COMPILED_CONFIG_FILENAME,
        fmt: str = COMPILED_FORMAT,
    ) -> str:
        """Write a selection of entries to a single file.

        The file is written to a temporary file first and moved in place, so
        a reader never sees a partially written file.

        Parameters
        ----------
        items : NestedMap
            Entries to export
        path : Union[str, os.PathLike]
            Existing directory in which to write the file
        key_filter : Union[str, Iterable[str]], optional
            `"*"` for every entry, a single dot-path or a list of dot-paths
        filename : str, optional
            Name of the file to write
        fmt : str, optional
            Format name

        Returns
        -------
        str
            Path to the written file

        Raises
        ------
        InvalidPathError
            If the target directory does not exist
        UnsupportedFormatError
            If no encoder is registered for the format
        """
        if not os.path.isdir(path):
            raise InvalidPathError(f"Export path `{os.fspath(path)}` does not exist.")

        if key_filter == ALL_KEYS:
            data = items.all()
        elif isinstance(key_filter, str):
            data = items.only([key_filter])
        else:
            data = items.only(key_filter)

        # Encode before touching the disk
        text = self.dump(data, fmt)

        output_path = Path(path) / filename
        temp_fd, temp_path = tempfile.mkstemp(
            dir=path, prefix=f".{filename}.", suffix=".tmp"
        )
        temp_path = Path(temp_path)

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                f.write(text)

            # Atomically move to final location (overwrites if exists)
            temp_path.replace(output_path)

        except Exception:
            # Clean up temp file on error
            if temp_path.exists():
                temp_path.unlink()
            raise

        logger.debug("Exported %d entries to %s", len(data), output_path)

        return str(output_path)

    def _is_path(self, source: Source, fmt: str) -> bool:
        """Whether a source should be read from disk rather than decoded."""
        if isinstance(source, os.PathLike):
            return True

        if os.path.isfile(source):
            return True

        # Only a bare token can name a missing file, never a document
        candidate = source.strip()
        if not candidate or any(char.isspace() for char in candidate):
            return False
        if "{" in candidate or "[" in candidate:
            return False

        suffixes = tuple(ext for ext, name in self.extensions.items() if name == fmt)

        return candidate.lower().endswith(suffixes)
