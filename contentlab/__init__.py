"""Content Lab: content lifecycle and deferred publication."""

__version__ = "0.1.0"
