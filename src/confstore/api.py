"""Constants shared by the confstore loaders.

This module defines the compiled artifact naming, the default folder mask and
the table which maps file extensions onto format names.
"""

# Name of the single-file artifact written by `ConfigStore.compile`. The
# trailing underscore keeps it out of every data-file mask.
COMPILED_CONFIG_FILENAME = "_compiled.json_"

# Format used to write the compiled artifact
COMPILED_FORMAT = "json"

# Top-level key recording where a compiled artifact was written
COMPILED_KEY = "compiled"

# Folder mask for the primary format; only this mask uses the compiled artifact
DEFAULT_MASK = "*.yaml"

# Export selector for every top-level key
ALL_KEYS = "*"

# Path separator for nested keys
KEY_SEPARATOR = "."

# Supported formats
FORMAT_JSON = "json"
FORMAT_YAML = "yaml"

# Extension (lower case, with dot) to format name
EXTENSIONS = {
    ".json": FORMAT_JSON,
    ".yaml": FORMAT_YAML,
    ".yml": FORMAT_YAML,
}
