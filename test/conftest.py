"""Sets up fixtures general to the entire test suite of this package.

This file is read during the collection phase of pytest when running anything
inside this directory.
"""

import pytest


@pytest.fixture(name="config_dir")
def fixture_config_dir(tmp_path):
    """Folder holding a small set of YAML and JSON configuration files.

    Parameters
    ----------
    tmp_path : pathlib.Path
       Generic pytest fixture used to handle temporary test files

    Returns
    -------
    pathlib.Path
        Path to the configuration folder
    """
    folder = tmp_path / "config"
    folder.mkdir()

    (folder / "app.yaml").write_text(
        """
name: demo
debug: false
features:
  - login
  - search
"""
    )

    (folder / "database.yaml").write_text(
        """
default: main
connections:
  main:
    host: localhost
    port: 5432
  replica:
    host: replica.local
    port: 5433
"""
    )

    (folder / "cache.json").write_text('{"driver": "redis", "ttl": 300}')

    return folder
