"""
Storage Layer.

This package handles all data persistence: the configuration file and the
per-kind enrichment caches.
"""

from .cache import Codec, EnrichmentCache, JsonFileStore, KeyValueStore, MemoryStore
from .config_manager import ConfigManager

__all__ = [
    "Codec",
    "ConfigManager",
    "EnrichmentCache",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
]
