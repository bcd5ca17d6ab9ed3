"""Configuration module: exports Settings and load_config."""

from archivist.config.loader import load_config
from archivist.config.settings import Settings

__all__ = ["Settings", "load_config"]
