"""confstore command line interface.

Usage Examples
--------------
Print the merged content of a configuration folder::

    confstore -f config/

Fetch a single value, overriding another one first::

    confstore -f config/ --set database.port=5433 --get database

Compile a folder to a single artifact for fast reloads::

    confstore -f config/ --compile config/
"""
