"""Typed exceptions for confstore.

This module defines specific exception types for the different ways loading,
accessing or writing a configuration can fail, making it easier to handle and
debug issues. Each exception also derives from the closest built-in exception
so callers can catch either.
"""


class ConfigError(Exception):
    """Base exception for all configuration errors."""


class InvalidPathError(ConfigError, NotADirectoryError):
    """Raised when a base path or target directory does not exist."""


class ConfigFileNotFoundError(ConfigError, FileNotFoundError):
    """Raised when a referenced configuration file cannot be found."""


class UnsupportedFormatError(ConfigError):
    """Raised when a file extension or format name is not recognized."""


class ConfigKeyError(ConfigError, KeyError):
    """Raised when a dot-path cannot be used to store a value."""


class FormatError(ConfigError):
    """Raised when a JSON or YAML document cannot be decoded."""

    def __init__(self, source: str, reason: str):
        """Initialize with the offending source.

        Parameters
        ----------
        source : str
            File path or a short excerpt of the raw document
        reason : str
            Parser error message
        """
        self.source = source
        self.reason = reason
        super().__init__(f"Could not decode {source}: {reason}")
