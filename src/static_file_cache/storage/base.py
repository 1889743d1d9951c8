from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol

from static_file_cache.schemas import CacheObject


class FallbackCache(Protocol):
    """Key/value cache the static-file decorator delegates to."""

    def get(self, cid: str) -> Any: ...

    def get_multiple(self, cids: Iterable[str]) -> dict[str, Any]: ...

    def set(self, cid: str, data: Any, expire: int = 0) -> Any: ...

    def clear(self, cid: str | None = None, wildcard: bool = False) -> None: ...

    def is_empty(self) -> bool: ...


def matches_clear(cid: str, pattern: str, *, wildcard: bool) -> bool:
    if not wildcard:
        return cid == pattern
    return pattern == "*" or cid.startswith(pattern)


def is_stale_for_general_clear(obj: CacheObject, now: int) -> bool:
    return obj.is_temporary() or obj.is_expired(now)
