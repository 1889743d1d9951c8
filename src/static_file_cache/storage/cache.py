from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from static_file_cache.schemas import CacheObject, Expire

from .base import is_stale_for_general_clear, matches_clear

logger = logging.getLogger(__name__)


class FileCache:
    """File-backed fallback cache, one JSON object per sha1-named file."""

    def __init__(
        self,
        bin_name: str,
        directory: str | Path,
        default_ttl_seconds: int | None = None,
    ) -> None:
        if default_ttl_seconds is not None and default_ttl_seconds < 0:
            raise ValueError("default_ttl_seconds must be >= 0")

        self.bin_name = bin_name
        self.directory = Path(directory) / bin_name
        self.directory.mkdir(parents=True, exist_ok=True)
        self.default_ttl_seconds = default_ttl_seconds

    def get(self, cid: str) -> CacheObject | None:
        data_path = self._data_path(cid)
        if not data_path.exists():
            logger.info("file_cache miss key=%s reason=not_found", self._sha1_key(cid))
            return None

        obj = self._read(data_path)
        if obj is None:
            return None

        if obj.is_expired(int(time.time())):
            data_path.unlink(missing_ok=True)
            logger.info("file_cache miss key=%s reason=expired", self._sha1_key(cid))
            return None

        logger.info("file_cache hit key=%s", self._sha1_key(cid))
        return obj

    def get_multiple(self, cids: Iterable[str]) -> dict[str, CacheObject]:
        found: dict[str, CacheObject] = {}
        for cid in cids:
            obj = self.get(cid)
            if obj is not None:
                found[cid] = obj
        return found

    def set(self, cid: str, data: Any, expire: int = Expire.PERMANENT) -> bool:
        if expire == Expire.PERMANENT and self.default_ttl_seconds is not None:
            expire = int(time.time()) + self.default_ttl_seconds

        obj = CacheObject(cid=cid, data=data, created=int(time.time()), expire=expire)
        self._data_path(cid).write_text(obj.model_dump_json(), encoding="utf-8")

        logger.info("file_cache set key=%s expire=%s", self._sha1_key(cid), obj.expire)
        return True

    def clear(self, cid: str | None = None, wildcard: bool = False) -> None:
        now = int(time.time())
        removed = 0
        for data_path in self.directory.glob("*.json"):
            obj = self._read(data_path)
            if obj is None:
                continue
            if cid is None:
                hit = is_stale_for_general_clear(obj, now)
            else:
                hit = matches_clear(obj.cid, cid, wildcard=wildcard)
            if hit:
                data_path.unlink(missing_ok=True)
                removed += 1
        logger.info(
            "file_cache clear bin=%s cid=%s wildcard=%s removed=%d",
            self.bin_name,
            cid,
            wildcard,
            removed,
        )

    def is_empty(self) -> bool:
        return not any(self.directory.glob("*.json"))

    @staticmethod
    def _sha1_key(key: str) -> str:
        return hashlib.sha1(key.encode("utf-8")).hexdigest()

    def _data_path(self, key: str) -> Path:
        return self.directory / f"{self._sha1_key(key)}.json"

    def _read(self, data_path: Path) -> CacheObject | None:
        try:
            return CacheObject.model_validate_json(data_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except ValidationError:
            logger.warning("file_cache corrupt path=%s", data_path)
            return None
