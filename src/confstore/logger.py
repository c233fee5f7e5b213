"""Simple module which defines the package logger and returns it."""

import logging

# Initialize logger, leave the handler configuration to the application
logger = logging.getLogger("confstore")
logger.addHandler(logging.NullHandler())
