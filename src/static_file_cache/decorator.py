from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from static_file_cache.config import CachePolicy, FallbackConfig
from static_file_cache.fallback import build_fallback_cache
from static_file_cache.schemas import CacheObject, Expire, full_cid
from static_file_cache.storage import FallbackCache, StaticFileStore
from static_file_cache.storage.base import matches_clear

logger = logging.getLogger(__name__)


class StaticFileCache:
    """Cache bin that serves whitelisted cids from static files.

    Every other cid goes to the fallback cache. A whitelisted cid never
    reaches the fallback: when the matching permission flag is off the
    operation simply fails (``None`` for reads, ``False`` for writes).

    The policy accessors are plain methods so a deployment or a test can
    override any one of them without touching the routing.
    """

    def __init__(
        self,
        bin_name: str,
        policy: CachePolicy | None = None,
        *,
        fallback_config: FallbackConfig | None = None,
    ) -> None:
        normalized = bin_name.strip()
        if not normalized:
            raise ValueError("bin_name must not be empty")

        self.bin_name = normalized
        self.policy = policy or CachePolicy()
        self.fallback_config = fallback_config or FallbackConfig()
        self._fallback: FallbackCache | None = None
        self._store: StaticFileStore | None = None

    # Policy accessors

    def is_get_allowed(self) -> bool:
        return self.policy.get_allowed

    def is_add_allowed(self) -> bool:
        return self.policy.add_allowed

    def is_update_allowed(self) -> bool:
        return self.policy.update_allowed

    def is_delete_allowed(self) -> bool:
        return self.policy.delete_allowed

    def get_whitelist_cids(self) -> frozenset[str]:
        return self.policy.whitelist_cids

    def is_cid_whitelisted(self, qualified_cid: str) -> bool:
        return qualified_cid in self.get_whitelist_cids()

    def get_fallback_cache_class(self) -> str:
        return self.policy.fallback_cache_class

    def get_fallback_cache(self) -> FallbackCache:
        if self._fallback is None:
            self._fallback = build_fallback_cache(
                self.get_fallback_cache_class(),
                self.bin_name,
                self.fallback_config,
            )
        return self._fallback

    def get_update_ignore_keys(self) -> frozenset[str]:
        return self.policy.update_ignore_keys

    def get_cache_directory_setting(self) -> str:
        return self.policy.cache_directory

    # Static file path

    @property
    def store(self) -> StaticFileStore:
        if self._store is None:
            self._store = StaticFileStore(self.bin_name, self.get_cache_directory_setting())
        return self._store

    def get_filepath_from_cid(self, cid: str) -> Path:
        return self.store.get_filepath_from_cid(cid)

    def get_cache_object_from_cid(self, cid: str) -> CacheObject | None:
        return self.store.load(cid)

    # Cache operations

    def get(self, cid: str) -> Any:
        whitelisted = self.is_cid_whitelisted(self._qualify(cid))
        if whitelisted and not self.is_get_allowed():
            logger.info("static_file_cache denied op=get bin=%s cid=%s", self.bin_name, cid)
            return None
        if whitelisted:
            return self.get_cache_object_from_cid(cid)
        return self.get_fallback_cache().get(cid)

    def get_multiple(self, cids: Iterable[str]) -> dict[str, Any]:
        requested = list(dict.fromkeys(cids))
        static_hits: dict[str, Any] = {}
        remaining: list[str] = []
        for cid in requested:
            if self.is_cid_whitelisted(self._qualify(cid)):
                obj = self.get(cid)
                if obj is not None:
                    static_hits[cid] = obj
            else:
                remaining.append(cid)

        fallback_hits: dict[str, Any] = {}
        if remaining:
            fallback_hits = self.get_fallback_cache().get_multiple(remaining)

        found: dict[str, Any] = {}
        for cid in requested:
            if cid in static_hits:
                found[cid] = static_hits[cid]
            elif cid in fallback_hits:
                found[cid] = fallback_hits[cid]
        return found

    def set(self, cid: str, data: Any, expire: int = Expire.PERMANENT) -> Any:
        if not self.is_cid_whitelisted(self._qualify(cid)):
            return self.get_fallback_cache().set(cid, data, expire)

        update_allowed = self.is_update_allowed()
        add_allowed = self.is_add_allowed()
        if not update_allowed and not add_allowed:
            logger.info("static_file_cache denied op=set bin=%s cid=%s", self.bin_name, cid)
            return False

        path = self.get_filepath_from_cid(cid)
        incoming = CacheObject(cid=cid, data=data, expire=expire)
        if path.exists():
            if not update_allowed:
                logger.info(
                    "static_file_cache denied op=update bin=%s cid=%s", self.bin_name, cid
                )
                return False
            existing = self.store.load_path(path)
            if existing is not None and self.store.is_unchanged(
                existing, incoming, self.get_update_ignore_keys()
            ):
                logger.info("static_file_cache unchanged bin=%s cid=%s", self.bin_name, cid)
                return True
        elif not add_allowed:
            logger.info("static_file_cache denied op=add bin=%s cid=%s", self.bin_name, cid)
            return False

        self.store.save(incoming, path)
        return True

    def clear(self, cid: str | None = None, wildcard: bool = False) -> None:
        if cid is None:
            self.get_fallback_cache().clear(None, False)
            return

        if wildcard:
            self.get_fallback_cache().clear(cid, True)
            if self.is_delete_allowed():
                self._clear_static_prefix(cid)
            return

        if not self.is_cid_whitelisted(self._qualify(cid)):
            self.get_fallback_cache().clear(cid, False)
            return

        if not self.is_delete_allowed():
            logger.info("static_file_cache denied op=clear bin=%s cid=%s", self.bin_name, cid)
            return
        self.store.delete(cid)

    def is_empty(self) -> bool:
        return self.store.is_empty() and self.get_fallback_cache().is_empty()

    def _clear_static_prefix(self, prefix: str) -> None:
        for cid in self.store.list_cids():
            if not matches_clear(cid, prefix, wildcard=True):
                continue
            if self.is_cid_whitelisted(self._qualify(cid)):
                self.store.delete(cid)

    def _qualify(self, cid: str) -> str:
        return full_cid(self.bin_name, cid)
