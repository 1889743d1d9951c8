from __future__ import annotations

import importlib
import logging
from collections.abc import Callable

from static_file_cache.config import FallbackConfig
from static_file_cache.storage import FallbackCache, FileCache, MemoryCache, NullCache

logger = logging.getLogger(__name__)

FallbackFactory = Callable[[str, FallbackConfig], FallbackCache]

FALLBACK_CACHE_CLASSES: dict[str, FallbackFactory] = {
    "memory": lambda bin_name, config: MemoryCache(bin_name),
    "null": lambda bin_name, config: NullCache(bin_name),
    "file": lambda bin_name, config: FileCache(
        bin_name,
        config.directory,
        default_ttl_seconds=config.default_ttl_seconds,
    ),
}


def build_fallback_cache(
    class_name: str,
    bin_name: str,
    config: FallbackConfig | None = None,
) -> FallbackCache:
    """Instantiate the fallback cache named by an alias or an import path.

    Aliases are the keys of ``FALLBACK_CACHE_CLASSES``. Anything else is read
    as ``package.module:ClassName`` (or ``package.module.ClassName``) and the
    class is called with the bin name as its only argument.
    """
    active_config = config or FallbackConfig()
    normalized = class_name.strip()

    factory = FALLBACK_CACHE_CLASSES.get(normalized.lower())
    if factory is not None:
        logger.info("fallback cache class=%s bin=%s", normalized.lower(), bin_name)
        return factory(bin_name, active_config)

    cache_cls = _import_class(normalized)
    logger.info("fallback cache class=%s bin=%s", normalized, bin_name)
    return cache_cls(bin_name)


def _import_class(path: str) -> Callable[[str], FallbackCache]:
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ValueError(f"Unknown fallback cache class: {path}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ValueError(f"Unknown fallback cache class: {path}") from exc

    cache_cls = getattr(module, attr, None)
    if not callable(cache_cls):
        raise ValueError(f"Unknown fallback cache class: {path}")
    return cache_cls
