"""UK weekly pay calculator."""

__version__ = "1.0.0"
