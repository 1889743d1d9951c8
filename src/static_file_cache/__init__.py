"""Static-file cache bin with a fallback cache for everything else."""

from .config import AppConfig, CachePolicy, FallbackConfig, load_config
from .decorator import StaticFileCache
from .fallback import build_fallback_cache
from .schemas import CacheObject, Expire

__all__ = [
    "AppConfig",
    "CacheObject",
    "CachePolicy",
    "Expire",
    "FallbackConfig",
    "StaticFileCache",
    "build_fallback_cache",
    "load_config",
]
