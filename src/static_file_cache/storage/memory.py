from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any

from static_file_cache.schemas import CacheObject, Expire

from .base import is_stale_for_general_clear, matches_clear

logger = logging.getLogger(__name__)


class MemoryCache:
    """In-process fallback cache. Contents live as long as the instance."""

    def __init__(self, bin_name: str) -> None:
        self.bin_name = bin_name
        self._items: dict[str, CacheObject] = {}

    def get(self, cid: str) -> CacheObject | None:
        obj = self._items.get(cid)
        if obj is None:
            return None
        if obj.is_expired(int(time.time())):
            del self._items[cid]
            return None
        return obj

    def get_multiple(self, cids: Iterable[str]) -> dict[str, CacheObject]:
        found: dict[str, CacheObject] = {}
        for cid in cids:
            obj = self.get(cid)
            if obj is not None:
                found[cid] = obj
        return found

    def set(self, cid: str, data: Any, expire: int = Expire.PERMANENT) -> bool:
        self._items[cid] = CacheObject(cid=cid, data=data, expire=expire)
        return True

    def clear(self, cid: str | None = None, wildcard: bool = False) -> None:
        now = int(time.time())
        if cid is None:
            doomed = [
                key for key, obj in self._items.items() if is_stale_for_general_clear(obj, now)
            ]
        else:
            doomed = [key for key in self._items if matches_clear(key, cid, wildcard=wildcard)]
        for key in doomed:
            del self._items[key]
        logger.debug(
            "memory_cache clear bin=%s cid=%s wildcard=%s removed=%d",
            self.bin_name,
            cid,
            wildcard,
            len(doomed),
        )

    def is_empty(self) -> bool:
        return not self._items


class NullCache:
    """Fallback that stores nothing."""

    def __init__(self, bin_name: str) -> None:
        self.bin_name = bin_name

    def get(self, cid: str) -> None:
        return None

    def get_multiple(self, cids: Iterable[str]) -> dict[str, CacheObject]:
        return {}

    def set(self, cid: str, data: Any, expire: int = Expire.PERMANENT) -> bool:
        return False

    def clear(self, cid: str | None = None, wildcard: bool = False) -> None:
        return None

    def is_empty(self) -> bool:
        return True
