"""Storage backends: static file store plus fallback caches."""

from .base import FallbackCache
from .cache import FileCache
from .memory import MemoryCache, NullCache
from .static_store import StaticFileStore

__all__ = ["FallbackCache", "FileCache", "MemoryCache", "NullCache", "StaticFileStore"]
