#!/usr/bin/env python3
"""Command line entry point to inspect and compile configuration folders."""

import argparse
import logging
import sys
from typing import List, Optional

from confstore.api import DEFAULT_MASK, FORMAT_JSON, FORMAT_YAML
from confstore.errors import ConfigError
from confstore.operations import parse_value
from confstore.store import ConfigStore

# Marks a missing value for --get, so that `None` values can be printed
_MISSING = object()


def main(
    folders: List[str],
    mask: str,
    files: List[str],
    config_overrides: List[str],
    get: Optional[str],
    compile_dir: Optional[str],
    output: str,
) -> int:
    """Load the requested sources, then print or compile the result.

    Parameters
    ----------
    folders : List[str]
        Configuration folders to import, in order
    mask : str
        Glob pattern of the files to import from each folder
    files : List[str]
        Individual configuration files to import after the folders
    config_overrides : List[str]
        List of config overrides in the form "key.path=value"
    get : str, optional
        Dot-path of the only value to print
    compile_dir : str, optional
        Directory in which to write the compiled artifact
    output : str
        Format used to print values ("json" or "yaml")

    Returns
    -------
    int
        Exit code
    """
    config = ConfigStore()
    for folder in folders:
        config.import_folder(folder, mask)
    for file_path in files:
        config.import_file(file_path)

    # Apply the command-line overrides
    for override in config_overrides:
        if "=" not in override:
            raise ValueError(
                f"Invalid config override format: '{override}'. "
                "Expected format: key.path=value"
            )
        key_path, value = override.split("=", 1)
        config.put(key_path.strip(), parse_value(value.strip()))

    if compile_dir is not None:
        print(config.compile(compile_dir))

    if get is not None:
        value = config.get(get, _MISSING)
        if value is _MISSING:
            print(f"Key `{get}` not found.", file=sys.stderr)
            return 1
        sys.stdout.write(config.formats.dump(value, output))

    elif compile_dir is None:
        sys.stdout.write(config.formats.dump(config.all(), output))

    return 0


def cli(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="confstore - Layered configuration loader",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  confstore -f config/                          Print the merged folder content
  confstore -f config/ -m '*.json'              Only import the JSON files
  confstore -f config/ --get database.host      Print a single value
  confstore -f config/ --set app.debug=true     Override a value before printing
  confstore -f config/ --compile config/        Write config/_compiled.json_
""",
    )

    # Add a version command
    parser.add_argument(
        "--version", action="version", version=f"confstore {get_version()}"
    )

    # Add the configuration sources
    parser.add_argument(
        "-f",
        "--folder",
        action="append",
        dest="folders",
        default=[],
        help="Configuration folder to import (can be used multiple times)",
    )
    parser.add_argument(
        "-m",
        "--mask",
        default=DEFAULT_MASK,
        help=f"Glob pattern of the files to import (default: {DEFAULT_MASK})",
    )
    parser.add_argument(
        "--file",
        action="append",
        dest="files",
        default=[],
        help="Configuration file to import (can be used multiple times)",
    )

    # Add option to dynamically override any config parameter using dot notation
    parser.add_argument(
        "--set",
        action="append",
        dest="config_overrides",
        default=[],
        metavar="KEY=VALUE",
        help="Override any config parameter using dot notation "
        "(e.g., --set database.port=5433). "
        "Can be used multiple times for multiple overrides.",
    )

    # Add the actions
    parser.add_argument("--get", metavar="KEY", help="Only print the value at KEY")
    parser.add_argument(
        "--compile",
        dest="compile_dir",
        metavar="DIR",
        help="Compile the configuration to a single file in DIR",
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=[FORMAT_JSON, FORMAT_YAML],
        default=FORMAT_YAML,
        help="Format used to print values (default: yaml)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log every imported file"
    )

    # Parse the arguments
    args = parser.parse_args(argv)

    # Set the verbosity of the logger
    logging.basicConfig(format="%(message)s", stream=sys.stderr)
    if args.verbose:
        logging.getLogger("confstore").setLevel(logging.DEBUG)

    try:
        code = main(
            args.folders,
            args.mask,
            args.files,
            args.config_overrides,
            args.get,
            args.compile_dir,
            args.output,
        )
    except (ConfigError, ValueError) as err:
        parser.exit(1, f"confstore: error: {err}\n")

    sys.exit(code)


def get_version():
    """Get the confstore version."""
    from confstore.version import __version__

    return __version__


if __name__ == "__main__":
    cli()
