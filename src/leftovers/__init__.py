"""leftovers - find data left behind by uninstalled Mac apps."""

__version__ = "0.1.0"
