"""Configuration module -- exports Settings and load_config."""

from docstore_cache.config.loader import load_config
from docstore_cache.config.settings import Settings

__all__ = ["Settings", "load_config"]
