"""Archivist: preserve articles and sources in the Internet Archive."""

__version__ = "0.1.0"
