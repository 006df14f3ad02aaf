"""modkill - find and remove node_modules (or any named) directories."""

__version__ = "0.1.0"
PACKAGE_NAME = "modkill"
